import re
from datetime import date, time, timedelta
from unittest.mock import patch

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext
from django.utils import timezone

from appointments.models import AvailabilitySlot
from appointments.services import (
    AvailabilityCalendarService,
    BookingConflictError,
    BookingValidationError,
    InvalidStateTransitionError,
    ResourceNotFoundError,
)
from factories.scheduling import (
    AppointmentFactory,
    AvailabilitySlotFactory,
    DoctorFactory,
)


class ListAvailableTest(TestCase):

    def setUp(self):
        self.service = AvailabilityCalendarService()
        self.doctor = DoctorFactory()
        self.other_doctor = DoctorFactory()

        self.later = AvailabilitySlotFactory(
            doctor=self.doctor, available_date=date(2030, 1, 2), start_time=time(9, 0), end_time=time(10, 0)
        )
        self.afternoon = AvailabilitySlotFactory(
            doctor=self.doctor, available_date=date(2030, 1, 1), start_time=time(14, 0), end_time=time(15, 0)
        )
        self.morning = AvailabilitySlotFactory(
            doctor=self.doctor, available_date=date(2030, 1, 1), start_time=time(8, 0), end_time=time(9, 0),
            status=AvailabilitySlot.STATUS_BLOCKED
        )
        self.inactive = AvailabilitySlotFactory(
            doctor=self.doctor, available_date=date(2030, 1, 3), start_time=time(8, 0), end_time=time(9, 0),
            is_active=False
        )
        AvailabilitySlotFactory(doctor=self.other_doctor, available_date=date(2030, 1, 1))

    def test_orders_by_date_then_start_time(self):
        slots = self.service.list_available(self.doctor.pk)

        self.assertEqual(
            [slot.pk for slot in slots],
            [self.morning.pk, self.afternoon.pk, self.later.pk, self.inactive.pk]
        )

    def test_date_range_filter(self):
        slots = self.service.list_available(self.doctor.pk, date_from=date(2030, 1, 2), date_to='2030-01-02')

        self.assertEqual([slot.pk for slot in slots], [self.later.pk])

    def test_status_and_active_filters(self):
        available = self.service.list_available(self.doctor.pk, status='available', is_active=True)
        inactive = self.service.list_available(self.doctor.pk, is_active=False)

        self.assertEqual([slot.pk for slot in available], [self.afternoon.pk, self.later.pk])
        self.assertEqual([slot.pk for slot in inactive], [self.inactive.pk])

    def test_unknown_status_rejected(self):
        with self.assertRaises(BookingValidationError):
            self.service.list_available(self.doctor.pk, status='free')

    def test_inverted_range_rejected(self):
        with self.assertRaises(BookingValidationError):
            self.service.list_available(self.doctor.pk, date_from='2030-01-05', date_to='2030-01-01')

    def test_unknown_doctor(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.list_available(999999)


class ReserveTest(TestCase):

    def setUp(self):
        self.service = AvailabilityCalendarService()
        self.doctor = DoctorFactory()
        self.slot_a = AvailabilitySlotFactory(doctor=self.doctor)
        self.slot_b = AvailabilitySlotFactory(doctor=self.doctor)

    def test_reserve_marks_slots_booked_in_requested_order(self):
        reserved = self.service.reserve(self.doctor.pk, [self.slot_b.pk, self.slot_a.pk])

        self.assertEqual([slot.pk for slot in reserved], [self.slot_b.pk, self.slot_a.pk])
        self.assertEqual(reserved[0].starts_at.date(), self.slot_b.available_date)
        for slot in (self.slot_a, self.slot_b):
            slot.refresh_from_db()
            self.assertEqual(slot.status, AvailabilitySlot.STATUS_BOOKED)

    def test_claims_run_in_ascending_id_order(self):
        slot_c = AvailabilitySlotFactory(doctor=self.doctor)
        requested = [slot_c.pk, self.slot_a.pk, self.slot_b.pk]

        with CaptureQueriesContext(connection) as queries:
            reserved = self.service.reserve(self.doctor.pk, requested)

        claimed_ids = [
            int(match.group(1))
            for query in queries.captured_queries
            if query['sql'].startswith('UPDATE')
            for match in [re.search(r'"doctor_availability"\."id" = (\d+)', query['sql'])]
            if match
        ]
        self.assertEqual(claimed_ids, sorted(requested))
        self.assertEqual([slot.pk for slot in reserved], requested)

    def test_unknown_slot(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.reserve(self.doctor.pk, [self.slot_a.pk, 999999])

        self.slot_a.refresh_from_db()
        self.assertEqual(self.slot_a.status, AvailabilitySlot.STATUS_AVAILABLE)

    def test_slot_of_other_doctor(self):
        foreign = AvailabilitySlotFactory(doctor=DoctorFactory())

        with self.assertRaises(BookingConflictError):
            self.service.reserve(self.doctor.pk, [foreign.pk])

    def test_already_booked_slot(self):
        self.service.reserve(self.doctor.pk, [self.slot_a.pk])

        with self.assertRaises(BookingConflictError):
            self.service.reserve(self.doctor.pk, [self.slot_a.pk])

    def test_inactive_slot(self):
        self.slot_a.is_active = False
        self.slot_a.save()

        with self.assertRaises(BookingConflictError):
            self.service.reserve(self.doctor.pk, [self.slot_a.pk])

    def test_duplicate_ids_rejected(self):
        with self.assertRaises(BookingValidationError):
            self.service.reserve(self.doctor.pk, [self.slot_a.pk, self.slot_a.pk])

    def test_empty_request_rejected(self):
        with self.assertRaises(BookingValidationError):
            self.service.reserve(self.doctor.pk, [])

    def test_lost_race_raises_conflict_and_rolls_back_earlier_claims(self):
        """
        Another request books slot_b between our read and our conditional
        update; slot_a, already claimed in this call, must be released again.
        """
        stale_b = AvailabilitySlot.objects.get(pk=self.slot_b.pk)
        stale_a = AvailabilitySlot.objects.get(pk=self.slot_a.pk)
        AvailabilitySlot.objects.filter(pk=self.slot_b.pk).update(status=AvailabilitySlot.STATUS_BOOKED)

        with patch.object(
            AvailabilityCalendarService,
            '_fetch_candidate_slots',
            return_value={self.slot_a.pk: stale_a, self.slot_b.pk: stale_b},
        ):
            with self.assertRaises(BookingConflictError):
                self.service.reserve(self.doctor.pk, [self.slot_a.pk, self.slot_b.pk])

        self.slot_a.refresh_from_db()
        self.assertEqual(self.slot_a.status, AvailabilitySlot.STATUS_AVAILABLE)


class SlotManagementTest(TestCase):

    def setUp(self):
        self.service = AvailabilityCalendarService()
        self.doctor = DoctorFactory()

    def test_create_slot_accepts_short_and_long_time_formats(self):
        slot = self.service.create_slot(self.doctor.pk, '2030-05-01', '09:00', '10:30:00')

        self.assertEqual(slot.start_time, time(9, 0))
        self.assertEqual(slot.end_time, time(10, 30))
        self.assertEqual(slot.status, AvailabilitySlot.STATUS_AVAILABLE)
        self.assertTrue(slot.is_active)

    def test_create_slot_rejects_bad_time_format(self):
        with self.assertRaises(BookingValidationError):
            self.service.create_slot(self.doctor.pk, '2030-05-01', '9am', '10:00')

    def test_create_slot_requires_start_before_end(self):
        with self.assertRaises(BookingValidationError):
            self.service.create_slot(self.doctor.pk, '2030-05-01', '10:00', '10:00')

    def test_create_slot_unknown_doctor(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.create_slot(999999, '2030-05-01', '09:00', '10:00')

    def test_create_duplicate_slot_conflicts(self):
        self.service.create_slot(self.doctor.pk, '2030-05-01', '09:00', '10:00')

        with self.assertRaises(BookingConflictError):
            self.service.create_slot(self.doctor.pk, date(2030, 5, 1), time(9, 0), time(10, 0))

    def test_update_slot_moves_available_slot(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor, start_time=time(9, 0), end_time=time(10, 0))

        updated = self.service.update_slot(slot.pk, start_time='11:00', end_time='12:00')

        self.assertEqual(updated.start_time, time(11, 0))
        self.assertEqual(updated.end_time, time(12, 0))

    def test_update_slot_rejects_unknown_fields(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        with self.assertRaises(BookingValidationError):
            self.service.update_slot(slot.pk, doctor_id=self.doctor.pk)

    def test_update_slot_requires_a_field(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        with self.assertRaises(BookingValidationError):
            self.service.update_slot(slot.pk)

    def test_update_slot_rejects_inverted_times(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor, start_time=time(9, 0), end_time=time(10, 0))

        with self.assertRaises(BookingValidationError):
            self.service.update_slot(slot.pk, start_time='10:30')

    def test_update_slot_onto_existing_slot_conflicts(self):
        existing = AvailabilitySlotFactory(doctor=self.doctor, start_time=time(9, 0), end_time=time(10, 0))
        other = AvailabilitySlotFactory(doctor=self.doctor, start_time=time(9, 0), end_time=time(10, 0))

        with self.assertRaises(BookingConflictError):
            self.service.update_slot(other.pk, available_date=existing.available_date)

    def test_booked_slot_cannot_be_reopened_or_moved(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor, status=AvailabilitySlot.STATUS_BOOKED)

        with self.assertRaises(InvalidStateTransitionError):
            self.service.update_slot(slot.pk, status='available')
        with self.assertRaises(InvalidStateTransitionError):
            self.service.update_slot(slot.pk, available_date=slot.available_date + timedelta(days=1))

    def test_slots_are_not_booked_by_update(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        with self.assertRaises(InvalidStateTransitionError):
            self.service.update_slot(slot.pk, status='booked')

    def test_block_available_slot(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        updated = self.service.update_slot(slot.pk, status='blocked', is_active=False)

        self.assertEqual(updated.status, AvailabilitySlot.STATUS_BLOCKED)
        self.assertFalse(updated.is_active)

    def test_update_unknown_slot(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.update_slot(999999, is_active=False)

    def test_delete_slot(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        self.service.delete_slot(slot.pk)

        self.assertFalse(AvailabilitySlot.objects.filter(pk=slot.pk).exists())

    def test_delete_slot_referenced_by_appointment_conflicts(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor, status=AvailabilitySlot.STATUS_BOOKED)
        AppointmentFactory(availability=slot, session_number=1)

        with self.assertRaises(BookingConflictError):
            self.service.delete_slot(slot.pk)

        self.assertTrue(AvailabilitySlot.objects.filter(pk=slot.pk).exists())

    def test_get_slot(self):
        slot = AvailabilitySlotFactory(doctor=self.doctor)

        self.assertEqual(self.service.get_slot(slot.pk), slot)
        with self.assertRaises(ResourceNotFoundError):
            self.service.get_slot(999999)


class ExpirePastSlotsTest(TestCase):

    def test_deactivates_only_past_available_slots(self):
        today = timezone.now().date()
        doctor = DoctorFactory()
        past_available = AvailabilitySlotFactory(doctor=doctor, available_date=today - timedelta(days=1))
        past_booked = AvailabilitySlotFactory(
            doctor=doctor, available_date=today - timedelta(days=2), status=AvailabilitySlot.STATUS_BOOKED
        )
        upcoming = AvailabilitySlotFactory(doctor=doctor, available_date=today)

        expired = AvailabilityCalendarService().expire_past_slots(today)

        self.assertEqual(expired, 1)
        past_available.refresh_from_db()
        past_booked.refresh_from_db()
        upcoming.refresh_from_db()
        self.assertFalse(past_available.is_active)
        self.assertTrue(past_booked.is_active)
        self.assertTrue(upcoming.is_active)
