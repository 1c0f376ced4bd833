# appointments/services/booking_service.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from catalog.services import ServiceCatalog
from clients.services import ClientService
from doctors.services import DoctorDirectory
from ..models import Appointment, Order
from .availability_service import AvailabilityCalendarService
from .exceptions import (
    BookingConflictError,
    BookingValidationError,
    InvalidStateTransitionError,
    ResourceNotFoundError,
    SchedulingServiceError,
)
from .unit_of_work import UnitOfWork
from .validation import (
    coerce_datetime,
    coerce_time,
    reject_unknown_fields,
    require_amount,
    require_choice,
    require_int,
)

logger = logging.getLogger(__name__)


class OrderBookingService:
    """
    Creates orders and expands them into appointments.

    Appointments come from one of two batch operations: order creation with
    explicitly chosen availability slots, or the first confirmation of an
    order that has none yet.
    """

    UPDATABLE_FIELDS = (
        'notes', 'payment_method', 'payment_status', 'paid_at',
        'amount', 'number_of_sessions', 'status',
    )

    def __init__(self, uow: Optional[UnitOfWork] = None,
                 calendar: Optional[AvailabilityCalendarService] = None,
                 catalog: Optional[ServiceCatalog] = None,
                 doctors: Optional[DoctorDirectory] = None):
        self.uow = uow or UnitOfWork()
        self.doctors = doctors or DoctorDirectory(using=self.uow.using)
        self.catalog = catalog or ServiceCatalog(using=self.uow.using)
        self.calendar = calendar or AvailabilityCalendarService(uow=self.uow, doctors=self.doctors)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_order(self, client_id, doctor_id, service_id, number_of_sessions, amount,
                     payment_method=None, payment_status=None, availability_ids=None,
                     notes='') -> Order:
        """
        Validate and create an order.

        With ``availability_ids`` the slots are reserved and one pending
        appointment per slot is created, numbered in the order given. The
        reservation, the order row and the appointment rows commit together.
        Without slots the order starts with no appointments.
        """
        require_int('client_id', client_id)
        require_int('doctor_id', doctor_id)
        require_int('service_id', service_id)
        require_int('number_of_sessions', number_of_sessions)
        amount = require_amount('amount', amount)

        if availability_ids is not None:
            if not isinstance(availability_ids, (list, tuple)):
                raise BookingValidationError("availability_ids must be a list of slot ids")
            for slot_id in availability_ids:
                require_int('availability_ids', slot_id)

        service = self.catalog.lookup(service_id)
        if service is None:
            raise ResourceNotFoundError("Service not found")
        if number_of_sessions > service.max_sessions:
            raise BookingValidationError(
                f"number_of_sessions ({number_of_sessions}) exceeds the service maximum ({service.max_sessions})"
            )

        if not self.doctors.is_active(doctor_id):
            raise ResourceNotFoundError("Doctor not found")
        if not ClientService.exists(client_id, using=self.uow.using):
            raise ResourceNotFoundError("Client not found")

        if availability_ids is not None and len(availability_ids) != number_of_sessions:
            raise BookingValidationError(
                f"Expected {number_of_sessions} availability slot(s), got {len(availability_ids)}"
            )

        try:
            with self.uow.atomic():
                slots = []
                if availability_ids:
                    slots = self.calendar.reserve(doctor_id, availability_ids)

                order = self.uow.query(Order).create(
                    client_id=client_id,
                    doctor_id=doctor_id,
                    service_id=service_id,
                    number_of_sessions=number_of_sessions,
                    amount=amount,
                    payment_method=payment_method or settings.DEFAULT_PAYMENT_METHOD,
                    payment_status=payment_status or settings.DEFAULT_PAYMENT_STATUS,
                    notes=notes or '',
                )

                if slots:
                    self.uow.query(Appointment).bulk_create([
                        Appointment(
                            order=order,
                            availability=slot,
                            session_number=position,
                            scheduled_at=slot.starts_at,
                            status=Appointment.STATUS_PENDING,
                        )
                        for position, slot in enumerate(slots, start=1)
                    ])

        except SchedulingServiceError:
            # Re-raise booking errors without wrapping them
            raise
        except IntegrityError as e:
            logger.warning(f"Order creation hit a uniqueness conflict: {str(e)}")
            raise BookingConflictError("One of the selected slots is already taken")

        logger.info(
            f"Order {order.pk} created for client {client_id} with doctor {doctor_id}: "
            f"{number_of_sessions} session(s), {len(slots)} slot(s) reserved"
        )
        return order

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def transition_order_status(self, order_id, new_status) -> Order:
        """
        Move an order to ``new_status`` following ORDER_STATUS_TRANSITIONS.

        The order row is locked and the write is conditional on the old
        status. The first pending -> confirmed move generates the weekly
        appointments when the order has none.
        """
        require_choice('status', new_status, Order.STATUS_CHOICES)

        with self.uow.atomic():
            order = self._lock_order(order_id)
            old_status = order.status

            if not order.can_transition_to(new_status):
                raise InvalidStateTransitionError(
                    f"Cannot change order status from '{old_status}' to '{new_status}'"
                )

            now = timezone.now()
            fields = {'status': new_status, 'updated_at': now}
            if new_status == Order.STATUS_IN_PROGRESS:
                fields['started_at'] = now
            elif new_status == Order.STATUS_COMPLETED:
                fields['completed_at'] = now

            written = self.uow.query(Order).filter(pk=order.pk, status=old_status).update(**fields)
            if written != 1:
                raise BookingConflictError("Order status was changed by another request")

            if old_status == Order.STATUS_PENDING and new_status == Order.STATUS_CONFIRMED:
                self._generate_weekly_appointments(order)

        logger.info(f"Order {order_id} status changed: {old_status} -> {new_status}")
        return self.get_order(order_id)

    def _generate_weekly_appointments(self, order: Order) -> List[Appointment]:
        existing = self.uow.query(Appointment).filter(order_id=order.pk).count()
        if existing:
            logger.info(f"Order {order.pk} already has {existing} appointment(s); none generated")
            return []

        require_int('number_of_sessions', order.number_of_sessions)
        service = self.catalog.lookup(order.service_id)
        if service is not None and order.number_of_sessions > service.max_sessions:
            raise BookingValidationError(
                f"number_of_sessions ({order.number_of_sessions}) exceeds the service maximum ({service.max_sessions})"
            )

        time_of_day = coerce_time('DEFAULT_APPOINTMENT_TIME', settings.DEFAULT_APPOINTMENT_TIME)
        interval = timedelta(days=settings.APPOINTMENT_INTERVAL_DAYS)
        first_day = timezone.now().date() + interval

        appointments = [
            Appointment(
                order_id=order.pk,
                session_number=number,
                scheduled_at=datetime.combine(first_day + interval * (number - 1), time_of_day),
                status=Appointment.STATUS_PENDING,
            )
            for number in range(1, order.number_of_sessions + 1)
        ]

        try:
            with self.uow.atomic():
                created = self.uow.query(Appointment).bulk_create(appointments)
        except IntegrityError:
            raise BookingConflictError("Appointments for this order were created by another request")

        logger.info(f"Generated {len(created)} weekly appointment(s) for order {order.pk}")
        return created

    # ------------------------------------------------------------------
    # Order maintenance
    # ------------------------------------------------------------------

    def get_order(self, order_id) -> Order:
        try:
            return (
                self.uow.query(Order)
                .select_related('client__user', 'doctor', 'service')
                .prefetch_related('appointments')
                .get(pk=order_id)
            )
        except Order.DoesNotExist:
            raise ResourceNotFoundError("Order not found")

    def list_orders(self, client_id=None):
        queryset = (
            self.uow.query(Order)
            .select_related('client__user', 'doctor', 'service')
            .prefetch_related('appointments')
            .order_by('-created_at', '-pk')
        )
        if client_id is not None:
            queryset = queryset.filter(client_id=client_id)
        return queryset

    def update_order(self, order_id, **fields) -> Order:
        """
        Update editable order fields. A ``status`` value goes through
        transition_order_status in the same transaction.
        """
        reject_unknown_fields(fields, self.UPDATABLE_FIELDS)
        new_status = fields.pop('status', None)

        with self.uow.atomic():
            order = self._lock_order(order_id)

            if 'amount' in fields:
                order.amount = require_amount('amount', fields['amount'])
            if 'number_of_sessions' in fields:
                sessions = require_int('number_of_sessions', fields['number_of_sessions'])
                if sessions != order.number_of_sessions:
                    if self.uow.query(Appointment).filter(order_id=order.pk).exists():
                        raise BookingConflictError(
                            "number_of_sessions cannot change once appointments exist"
                        )
                    service = self.catalog.lookup(order.service_id)
                    if service is not None and sessions > service.max_sessions:
                        raise BookingValidationError(
                            f"number_of_sessions ({sessions}) exceeds the service maximum ({service.max_sessions})"
                        )
                    order.number_of_sessions = sessions
            if 'paid_at' in fields:
                order.paid_at = None if fields['paid_at'] is None else coerce_datetime('paid_at', fields['paid_at'])
            for key in ('notes', 'payment_method', 'payment_status'):
                if key in fields:
                    if not isinstance(fields[key], str):
                        raise BookingValidationError(f"{key} must be a string")
                    setattr(order, key, fields[key])

            if fields:
                order.save(update_fields=list(fields) + ['updated_at'])

            if new_status is not None and new_status != order.status:
                self.transition_order_status(order.pk, new_status)

        logger.info(f"Order {order_id} updated: {sorted(fields) + (['status'] if new_status else [])}")
        return self.get_order(order_id)

    def delete_order(self, order_id) -> None:
        """
        Delete an order with its appointments and sessions. Reserved slots stay
        booked.
        """
        with self.uow.atomic():
            order = self._lock_order(order_id)
            order.delete()

        logger.info(f"Order {order_id} deleted")

    def _lock_order(self, order_id) -> Order:
        try:
            return self.uow.query(Order).select_for_update().get(pk=order_id)
        except Order.DoesNotExist:
            raise ResourceNotFoundError("Order not found")
