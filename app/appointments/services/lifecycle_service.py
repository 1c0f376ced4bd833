# appointments/services/lifecycle_service.py
import logging
from typing import Optional

from ..models import Appointment
from .aggregate_service import AggregateConsistencyService
from .exceptions import (
    InvalidStateTransitionError,
    ResourceNotFoundError,
    UnauthorizedActionError,
)
from .unit_of_work import UnitOfWork
from .validation import coerce_datetime, require_choice

logger = logging.getLogger(__name__)


class AppointmentLifecycleService:
    """
    Status changes of single appointments.

    Every operation locks the appointment together with its order, and any
    change that moves an appointment into or out of ``completed`` recomputes
    the order's completed_sessions before the transaction commits.
    """

    def __init__(self, uow: Optional[UnitOfWork] = None,
                 aggregates: Optional[AggregateConsistencyService] = None):
        self.uow = uow or UnitOfWork()
        self.aggregates = aggregates or AggregateConsistencyService(uow=self.uow)

    def get_appointment(self, appointment_id) -> Appointment:
        try:
            return (
                self.uow.query(Appointment)
                .select_related('order__client__user', 'order__doctor', 'order__service', 'availability')
                .get(pk=appointment_id)
            )
        except Appointment.DoesNotExist:
            raise ResourceNotFoundError("Appointment not found")

    def cancel(self, appointment_id, requesting_client_id) -> Appointment:
        """
        Cancel an appointment on behalf of the client who owns its order.
        The reserved slot, if any, stays booked.
        """
        with self.uow.atomic():
            appointment = self._lock(appointment_id)

            if appointment.order.client_id != requesting_client_id:
                raise UnauthorizedActionError("You can only cancel your own appointments")
            self._check_transition(appointment, Appointment.STATUS_CANCELLED)

            appointment.status = Appointment.STATUS_CANCELLED
            appointment.save(update_fields=['status', 'updated_at'])

        logger.info(f"Appointment {appointment_id} cancelled by client {requesting_client_id}")
        return appointment

    def complete(self, appointment_id, completion_notes=None) -> Appointment:
        with self.uow.atomic():
            appointment = self._lock(appointment_id)
            self._check_transition(appointment, Appointment.STATUS_COMPLETED)

            appointment.status = Appointment.STATUS_COMPLETED
            update_fields = ['status', 'updated_at']
            if completion_notes is not None:
                appointment.completion_notes = completion_notes
                update_fields.append('completion_notes')
            appointment.save(update_fields=update_fields)

            completed = self.aggregates.recompute_completed_sessions(appointment.order_id)
            appointment.order.completed_sessions = completed

        logger.info(f"Appointment {appointment_id} completed ({completed}/{appointment.order.number_of_sessions})")
        return appointment

    def update_status(self, appointment_id, new_status, notes=None, completion_notes=None) -> Appointment:
        """
        Administrative status change. Any enumerated status is accepted,
        including moves out of completed or cancelled.
        """
        require_choice('status', new_status, Appointment.STATUS_CHOICES)

        with self.uow.atomic():
            appointment = self._lock(appointment_id)
            old_status = appointment.status

            appointment.status = new_status
            update_fields = ['status', 'updated_at']
            if notes is not None:
                appointment.notes = notes
                update_fields.append('notes')
            if completion_notes is not None:
                appointment.completion_notes = completion_notes
                update_fields.append('completion_notes')
            appointment.save(update_fields=update_fields)

            if (old_status == Appointment.STATUS_COMPLETED) != (new_status == Appointment.STATUS_COMPLETED):
                appointment.order.completed_sessions = (
                    self.aggregates.recompute_completed_sessions(appointment.order_id)
                )

        logger.info(f"Appointment {appointment_id} status changed: {old_status} -> {new_status}")
        return appointment

    def reschedule(self, appointment_id, new_scheduled_at) -> Appointment:
        """
        Move an appointment to a new time. The originally reserved slot stays
        bound to the appointment.
        """
        new_scheduled_at = coerce_datetime('scheduled_at', new_scheduled_at)

        with self.uow.atomic():
            appointment = self._lock(appointment_id)
            self._check_transition(appointment, Appointment.STATUS_RESCHEDULED)

            appointment.scheduled_at = new_scheduled_at
            appointment.status = Appointment.STATUS_RESCHEDULED
            appointment.save(update_fields=['scheduled_at', 'status', 'updated_at'])

        logger.info(f"Appointment {appointment_id} rescheduled to {new_scheduled_at}")
        return appointment

    def _lock(self, appointment_id) -> Appointment:
        try:
            return (
                self.uow.query(Appointment)
                .select_for_update()
                .select_related('order')
                .get(pk=appointment_id)
            )
        except Appointment.DoesNotExist:
            raise ResourceNotFoundError("Appointment not found")

    @staticmethod
    def _check_transition(appointment: Appointment, new_status: str):
        if not appointment.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                f"Cannot change appointment status from '{appointment.status}' to '{new_status}'"
            )
