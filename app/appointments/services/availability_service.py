# appointments/services/availability_service.py
import logging
from typing import Dict, Iterable, List, Optional

from django.db import IntegrityError
from django.utils import timezone

from doctors.services import DoctorDirectory
from ..models import Appointment, AvailabilitySlot
from .exceptions import (
    BookingConflictError,
    BookingValidationError,
    InvalidStateTransitionError,
    ResourceNotFoundError,
)
from .unit_of_work import UnitOfWork
from .validation import (
    coerce_date,
    coerce_time,
    reject_unknown_fields,
    require_choice,
    require_int,
)

logger = logging.getLogger(__name__)


class AvailabilityCalendarService:
    """
    Doctor availability slots and the reservation primitive used by bookings
    """

    UPDATABLE_FIELDS = ('available_date', 'start_time', 'end_time', 'status', 'is_active')

    def __init__(self, uow: Optional[UnitOfWork] = None, doctors: Optional[DoctorDirectory] = None):
        self.uow = uow or UnitOfWork()
        self.doctors = doctors or DoctorDirectory(using=self.uow.using)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_available(self, doctor_id, date_from=None, date_to=None, status=None, is_active=None) -> List[AvailabilitySlot]:
        """
        Slots of a doctor matching the filters, ordered by date then start time
        """
        require_int('doctor_id', doctor_id)
        if not self.doctors.exists(doctor_id):
            raise ResourceNotFoundError("Doctor not found")

        queryset = self.uow.query(AvailabilitySlot).filter(doctor_id=doctor_id)

        if date_from is not None:
            date_from = coerce_date('start_date', date_from)
            queryset = queryset.filter(available_date__gte=date_from)
        if date_to is not None:
            date_to = coerce_date('end_date', date_to)
            queryset = queryset.filter(available_date__lte=date_to)
        if date_from is not None and date_to is not None and date_from > date_to:
            raise BookingValidationError("start_date must be on or before end_date")
        if status is not None:
            require_choice('status', status, AvailabilitySlot.STATUS_CHOICES)
            queryset = queryset.filter(status=status)
        if is_active is not None:
            queryset = queryset.filter(is_active=bool(is_active))

        return list(queryset.order_by('available_date', 'start_time'))

    def get_slot(self, slot_id) -> AvailabilitySlot:
        try:
            return self.uow.query(AvailabilitySlot).select_related('doctor').get(pk=slot_id)
        except AvailabilitySlot.DoesNotExist:
            raise ResourceNotFoundError("Availability slot not found")

    # ------------------------------------------------------------------
    # Reservation
    # ------------------------------------------------------------------

    def reserve(self, doctor_id, slot_ids: Iterable[int]) -> List[AvailabilitySlot]:
        """
        Mark every slot in ``slot_ids`` as booked for ``doctor_id``.

        Each slot is claimed with a conditional update that only matches
        while the slot is still available and active. If any claim changes
        no row, another request got there first and the whole enclosing
        unit of work is aborted with BookingConflictError. Claims run in
        ascending slot id order whatever order the caller used.

        Returns the slots in the order they were requested.
        """
        ids = list(slot_ids)
        if not ids:
            raise BookingValidationError("At least one availability slot is required")
        for slot_id in ids:
            require_int('availability_ids', slot_id)
        if len(set(ids)) != len(ids):
            raise BookingValidationError("Duplicate availability slots in request")

        with self.uow.atomic():
            slots = self._fetch_candidate_slots(ids)

            missing = [slot_id for slot_id in ids if slot_id not in slots]
            if missing:
                raise ResourceNotFoundError(
                    f"Availability slot(s) not found: {', '.join(str(m) for m in missing)}",
                    details={'missing_ids': missing}
                )

            for slot_id in ids:
                slot = slots[slot_id]
                if slot.doctor_id != doctor_id:
                    raise BookingConflictError(f"Availability slot {slot_id} does not belong to this doctor")
                if not slot.is_bookable:
                    raise BookingConflictError(f"Availability slot {slot_id} is no longer available")

            # Claim in ascending id order so concurrent reservations of the
            # same slots lock rows in the same sequence
            now = timezone.now()
            for slot_id in sorted(ids):
                claimed = self.uow.query(AvailabilitySlot).filter(
                    pk=slot_id,
                    doctor_id=doctor_id,
                    status=AvailabilitySlot.STATUS_AVAILABLE,
                    is_active=True,
                ).update(status=AvailabilitySlot.STATUS_BOOKED, updated_at=now)

                if claimed != 1:
                    logger.warning(f"Lost reservation race for slot {slot_id} (doctor {doctor_id})")
                    raise BookingConflictError(f"Availability slot {slot_id} is no longer available")

                slots[slot_id].status = AvailabilitySlot.STATUS_BOOKED
                slots[slot_id].updated_at = now

        logger.info(f"Reserved {len(ids)} slot(s) for doctor {doctor_id}: {ids}")
        return [slots[slot_id] for slot_id in ids]

    def _fetch_candidate_slots(self, ids: List[int]) -> Dict[int, AvailabilitySlot]:
        return self.uow.query(AvailabilitySlot).in_bulk(ids)

    # ------------------------------------------------------------------
    # Slot management
    # ------------------------------------------------------------------

    def create_slot(self, doctor_id, available_date, start_time, end_time,
                    status=AvailabilitySlot.STATUS_AVAILABLE, is_active=True) -> AvailabilitySlot:
        require_int('doctor_id', doctor_id)
        available_date = coerce_date('available_date', available_date)
        start_time = coerce_time('start_time', start_time)
        end_time = coerce_time('end_time', end_time)
        require_choice('status', status, AvailabilitySlot.STATUS_CHOICES)
        if start_time >= end_time:
            raise BookingValidationError("start_time must be before end_time")

        if not self.doctors.exists(doctor_id):
            raise ResourceNotFoundError("Doctor not found")

        if self._duplicate_exists(doctor_id, available_date, start_time, end_time):
            raise BookingConflictError("This availability slot already exists for the doctor")

        try:
            with self.uow.atomic():
                slot = self.uow.query(AvailabilitySlot).create(
                    doctor_id=doctor_id,
                    available_date=available_date,
                    start_time=start_time,
                    end_time=end_time,
                    status=status,
                    is_active=bool(is_active),
                )
        except IntegrityError:
            raise BookingConflictError("This availability slot already exists for the doctor")

        logger.info(f"Availability slot {slot.pk} created for doctor {doctor_id} on {available_date}")
        return slot

    def update_slot(self, slot_id, **fields) -> AvailabilitySlot:
        """
        Change date, times, status or active flag of a slot.

        Booked slots keep their date, times and status; only ``is_active``
        may change once a reservation holds them.
        """
        reject_unknown_fields(fields, self.UPDATABLE_FIELDS)

        try:
            with self.uow.atomic():
                try:
                    slot = self.uow.query(AvailabilitySlot).select_for_update().get(pk=slot_id)
                except AvailabilitySlot.DoesNotExist:
                    raise ResourceNotFoundError("Availability slot not found")

                changes = {}
                if 'available_date' in fields:
                    changes['available_date'] = coerce_date('available_date', fields['available_date'])
                if 'start_time' in fields:
                    changes['start_time'] = coerce_time('start_time', fields['start_time'])
                if 'end_time' in fields:
                    changes['end_time'] = coerce_time('end_time', fields['end_time'])
                if 'status' in fields:
                    changes['status'] = require_choice('status', fields['status'], AvailabilitySlot.STATUS_CHOICES)
                if 'is_active' in fields:
                    changes['is_active'] = bool(fields['is_active'])

                moved = any(
                    key in changes and changes[key] != getattr(slot, key)
                    for key in ('available_date', 'start_time', 'end_time')
                )
                status_changed = 'status' in changes and changes['status'] != slot.status

                if slot.status == AvailabilitySlot.STATUS_BOOKED and (moved or status_changed):
                    raise InvalidStateTransitionError("A booked slot cannot be moved or reopened")
                if status_changed and changes['status'] == AvailabilitySlot.STATUS_BOOKED:
                    raise InvalidStateTransitionError("Slots become booked only through a reservation")

                for key, value in changes.items():
                    setattr(slot, key, value)

                if slot.start_time >= slot.end_time:
                    raise BookingValidationError("start_time must be before end_time")

                if moved and self._duplicate_exists(
                    slot.doctor_id, slot.available_date, slot.start_time, slot.end_time, exclude_id=slot.pk
                ):
                    raise BookingConflictError("This availability slot already exists for the doctor")

                slot.save()
        except IntegrityError:
            raise BookingConflictError("This availability slot already exists for the doctor")

        logger.info(f"Availability slot {slot_id} updated: {sorted(fields)}")
        return slot

    def delete_slot(self, slot_id) -> None:
        with self.uow.atomic():
            try:
                slot = self.uow.query(AvailabilitySlot).select_for_update().get(pk=slot_id)
            except AvailabilitySlot.DoesNotExist:
                raise ResourceNotFoundError("Availability slot not found")

            if self.uow.query(Appointment).filter(availability_id=slot.pk).exists():
                raise BookingConflictError("Cannot delete a slot that is referenced by an appointment")

            slot.delete()

        logger.info(f"Availability slot {slot_id} deleted")

    def expire_past_slots(self, today=None) -> int:
        """
        Deactivate still-available slots dated before ``today``
        """
        today = today or timezone.now().date()
        with self.uow.atomic():
            expired = self.uow.query(AvailabilitySlot).filter(
                available_date__lt=today,
                status=AvailabilitySlot.STATUS_AVAILABLE,
                is_active=True,
            ).update(is_active=False, updated_at=timezone.now())

        if expired:
            logger.info(f"Deactivated {expired} past availability slot(s) before {today}")
        return expired

    def _duplicate_exists(self, doctor_id, available_date, start_time, end_time, exclude_id=None) -> bool:
        queryset = self.uow.query(AvailabilitySlot).filter(
            doctor_id=doctor_id,
            available_date=available_date,
            start_time=start_time,
            end_time=end_time,
        )
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()
