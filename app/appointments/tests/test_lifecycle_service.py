from datetime import datetime, timedelta

from django.test import TestCase

from appointments.models import Appointment, AvailabilitySlot, Order
from appointments.services import (
    AppointmentLifecycleService,
    BookingValidationError,
    InvalidStateTransitionError,
    ResourceNotFoundError,
    UnauthorizedActionError,
)
from factories.scheduling import AppointmentFactory, AvailabilitySlotFactory, OrderFactory
from factories.users import ClientFactory


class LifecycleTestCase(TestCase):

    def setUp(self):
        self.service = AppointmentLifecycleService()
        self.order = OrderFactory(number_of_sessions=3, status=Order.STATUS_CONFIRMED)
        self.appointments = [
            AppointmentFactory(order=self.order, session_number=number)
            for number in (1, 2, 3)
        ]


class CompleteTest(LifecycleTestCase):

    def test_each_completion_updates_order_counter(self):
        for expected, appointment in enumerate(self.appointments, start=1):
            completed = self.service.complete(appointment.pk, completion_notes=f'Session {expected} done')

            self.assertEqual(completed.status, Appointment.STATUS_COMPLETED)
            self.assertEqual(completed.order.completed_sessions, expected)
            self.order.refresh_from_db()
            self.assertEqual(self.order.completed_sessions, expected)

        self.assertEqual(self.order.remaining_sessions, 0)
        self.assertEqual(
            Appointment.objects.get(pk=self.appointments[0].pk).completion_notes, 'Session 1 done'
        )

    def test_completing_twice_is_refused(self):
        appointment = self.appointments[0]
        self.service.complete(appointment.pk)

        with self.assertRaises(InvalidStateTransitionError):
            self.service.complete(appointment.pk)

        self.order.refresh_from_db()
        self.assertEqual(self.order.completed_sessions, 1)

    def test_cancelled_appointment_cannot_be_completed(self):
        appointment = self.appointments[0]
        appointment.status = Appointment.STATUS_CANCELLED
        appointment.save()

        with self.assertRaises(InvalidStateTransitionError):
            self.service.complete(appointment.pk)

        self.order.refresh_from_db()
        self.assertEqual(self.order.completed_sessions, 0)

    def test_counter_is_recomputed_not_incremented(self):
        Order.objects.filter(pk=self.order.pk).update(completed_sessions=2)

        completed = self.service.complete(self.appointments[0].pk)

        self.assertEqual(completed.order.completed_sessions, 1)

    def test_missing_appointment(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.complete(999999)


class CancelTest(LifecycleTestCase):

    def test_owner_cancels(self):
        slot = AvailabilitySlotFactory(doctor=self.order.doctor, status=AvailabilitySlot.STATUS_BOOKED)
        appointment = AppointmentFactory(order=self.order, session_number=4, availability=slot)

        cancelled = self.service.cancel(appointment.pk, self.order.client_id)

        self.assertEqual(cancelled.status, Appointment.STATUS_CANCELLED)
        slot.refresh_from_db()
        self.assertEqual(slot.status, AvailabilitySlot.STATUS_BOOKED)

    def test_other_client_is_refused(self):
        stranger = ClientFactory()
        appointment = self.appointments[0]

        with self.assertRaises(UnauthorizedActionError):
            self.service.cancel(appointment.pk, stranger.pk)

        appointment.refresh_from_db()
        self.assertEqual(appointment.status, Appointment.STATUS_PENDING)

    def test_ownership_checked_before_state(self):
        appointment = self.appointments[0]
        appointment.status = Appointment.STATUS_COMPLETED
        appointment.save()

        with self.assertRaises(UnauthorizedActionError):
            self.service.cancel(appointment.pk, ClientFactory().pk)

    def test_terminal_appointment_cannot_be_cancelled(self):
        appointment = self.appointments[0]
        self.service.complete(appointment.pk)

        with self.assertRaises(InvalidStateTransitionError):
            self.service.cancel(appointment.pk, self.order.client_id)

        appointment.refresh_from_db()
        self.assertEqual(appointment.status, Appointment.STATUS_COMPLETED)


class RescheduleTest(LifecycleTestCase):

    def test_reschedule_moves_time_and_keeps_slot(self):
        slot = AvailabilitySlotFactory(doctor=self.order.doctor, status=AvailabilitySlot.STATUS_BOOKED)
        appointment = AppointmentFactory(order=self.order, session_number=4, availability=slot)
        new_time = appointment.scheduled_at + timedelta(days=2)

        moved = self.service.reschedule(appointment.pk, new_time.isoformat())

        self.assertEqual(moved.status, Appointment.STATUS_RESCHEDULED)
        appointment.refresh_from_db()
        self.assertEqual(appointment.scheduled_at, new_time)
        self.assertEqual(appointment.availability_id, slot.pk)

    def test_rescheduled_appointment_can_move_again(self):
        appointment = self.appointments[0]
        self.service.reschedule(appointment.pk, datetime(2030, 3, 1, 9, 0))

        moved = self.service.reschedule(appointment.pk, datetime(2030, 3, 8, 9, 0))

        self.assertEqual(moved.scheduled_at, datetime(2030, 3, 8, 9, 0))

    def test_terminal_appointment_cannot_be_rescheduled(self):
        appointment = self.appointments[0]
        self.service.complete(appointment.pk)

        with self.assertRaises(InvalidStateTransitionError):
            self.service.reschedule(appointment.pk, datetime(2030, 3, 1, 9, 0))

    def test_invalid_datetime(self):
        with self.assertRaises(BookingValidationError):
            self.service.reschedule(self.appointments[0].pk, 'next tuesday')


class AdminUpdateStatusTest(LifecycleTestCase):

    def test_completion_through_status_update_recomputes(self):
        updated = self.service.update_status(self.appointments[0].pk, 'completed', completion_notes='ok')

        self.assertEqual(updated.order.completed_sessions, 1)
        self.assertEqual(updated.completion_notes, 'ok')

    def test_reopening_completed_appointment_recomputes(self):
        appointment = self.appointments[0]
        self.service.complete(appointment.pk)

        reopened = self.service.update_status(appointment.pk, 'confirmed', notes='Reopened by admin')

        self.assertEqual(reopened.status, Appointment.STATUS_CONFIRMED)
        self.assertEqual(reopened.notes, 'Reopened by admin')
        self.order.refresh_from_db()
        self.assertEqual(self.order.completed_sessions, 0)

    def test_cancelled_appointment_can_be_restored(self):
        appointment = self.appointments[0]
        self.service.cancel(appointment.pk, self.order.client_id)

        restored = self.service.update_status(appointment.pk, 'pending')

        self.assertEqual(restored.status, Appointment.STATUS_PENDING)

    def test_unknown_status(self):
        with self.assertRaises(BookingValidationError):
            self.service.update_status(self.appointments[0].pk, 'no_show')

    def test_get_appointment(self):
        appointment = self.service.get_appointment(self.appointments[1].pk)

        self.assertEqual(appointment.session_number, 2)
        with self.assertRaises(ResourceNotFoundError):
            self.service.get_appointment(999999)
