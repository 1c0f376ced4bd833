# appointments/tests/test_views_AppointmentViewSet.py
from datetime import datetime

from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from users.models import User
from clients.models import Client
from appointments.models import Appointment, Order
from factories.scheduling import AppointmentFactory, DoctorFactory, OrderFactory


class AppointmentViewSetTestCase(APITestCase):
    """
    Test cases for AppointmentViewSet
    """

    def setUp(self):
        self.client_user = User.objects.create_client(email='client@test.com', password='testpass123')
        self.client_profile = Client.objects.get(user=self.client_user)

        self.other_user = User.objects.create_client(email='other@test.com', password='testpass123')
        self.other_profile = Client.objects.get(user=self.other_user)

        self.admin_user = User.objects.create_admin(email='admin@test.com', password='testpass123')

        self.doctor = DoctorFactory()
        self.order = OrderFactory(
            client=self.client_profile, doctor=self.doctor, number_of_sessions=3, status=Order.STATUS_CONFIRMED
        )
        self.appointments = [
            AppointmentFactory(order=self.order, session_number=n, scheduled_at=datetime(2030, 1, 6 + n, 10, 0))
            for n in (1, 2, 3)
        ]
        self.other_appointment = AppointmentFactory(
            order=OrderFactory(client=self.other_profile), session_number=1, scheduled_at=datetime(2030, 2, 1, 10, 0)
        )

    def authenticate(self, user):
        token, _ = Token.objects.get_or_create(user=user)
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')

    # ---- reads ----

    def test_my_appointments(self):
        self.authenticate(self.client_user)

        response = self.client.get(reverse('appointment-my'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(
            [a['id'] for a in response.data['appointments']],
            [a.pk for a in reversed(self.appointments)]
        )
        self.assertEqual(response.data['appointments'][0]['number_of_sessions'], 3)

    def test_admin_cannot_use_my_endpoint(self):
        self.authenticate(self.admin_user)

        response = self.client.get(reverse('appointment-my'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_is_admin_only(self):
        self.authenticate(self.client_user)
        self.assertEqual(self.client.get(reverse('appointment-list')).status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.admin_user)
        response = self.client.get(reverse('appointment-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 4)

    def test_retrieve_own_and_foreign(self):
        self.authenticate(self.client_user)

        own = self.client.get(reverse('appointment-detail', kwargs={'pk': self.appointments[0].pk}))
        foreign = self.client.get(reverse('appointment-detail', kwargs={'pk': self.other_appointment.pk}))

        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual(own.data['session_number'], 1)
        self.assertEqual(foreign.status_code, status.HTTP_403_FORBIDDEN)

    def test_week(self):
        self.authenticate(self.admin_user)

        response = self.client.get(reverse('appointment-week'), {'start': '2030-01-07', 'end': '2030-01-08'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [a['id'] for a in response.data['appointments']],
            [self.appointments[0].pk, self.appointments[1].pk]
        )

    def test_week_requires_valid_range(self):
        self.authenticate(self.admin_user)

        response = self.client.get(reverse('appointment-week'), {'start': '2030-01-08', 'end': '2030-01-07'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_doctor_appointments_paginated(self):
        self.authenticate(self.admin_user)
        url = reverse('appointment-doctor', kwargs={'doctor_id': self.doctor.pk})

        response = self.client.get(url, {'page': 2, 'limit': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual([a['id'] for a in response.data['appointments']], [self.appointments[0].pk])

    def test_doctor_appointments_unknown_doctor(self):
        self.authenticate(self.admin_user)

        response = self.client.get(reverse('appointment-doctor', kwargs={'doctor_id': 999999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    # ---- cancel ----

    def test_client_cancels_own_appointment(self):
        self.authenticate(self.client_user)

        response = self.client.put(
            reverse('appointment-cancel', kwargs={'pk': self.appointments[0].pk}), {}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['appointment']['status'], 'cancelled')

    def test_client_cannot_cancel_foreign_appointment(self):
        self.authenticate(self.client_user)

        response = self.client.put(
            reverse('appointment-cancel', kwargs={'pk': self.other_appointment.pk}), {}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['kind'], 'unauthorized')
        self.other_appointment.refresh_from_db()
        self.assertEqual(self.other_appointment.status, Appointment.STATUS_PENDING)

    def test_cancel_completed_appointment_conflicts(self):
        Appointment.objects.filter(pk=self.appointments[0].pk).update(status=Appointment.STATUS_COMPLETED)
        self.authenticate(self.client_user)

        response = self.client.put(
            reverse('appointment-cancel', kwargs={'pk': self.appointments[0].pk}), {}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'state_error')

    # ---- admin lifecycle ----

    def test_complete_updates_order_progress(self):
        self.authenticate(self.admin_user)

        for expected, appointment in enumerate(self.appointments, start=1):
            response = self.client.put(
                reverse('appointment-complete', kwargs={'pk': appointment.pk}),
                {'completion_notes': 'Went well'},
                format='json'
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data['appointment']['completed_sessions'], expected)

        self.order.refresh_from_db()
        self.assertEqual(self.order.completed_sessions, 3)

    def test_complete_twice_conflicts(self):
        self.authenticate(self.admin_user)
        url = reverse('appointment-complete', kwargs={'pk': self.appointments[0].pk})
        self.client.put(url, {}, format='json')

        response = self.client.put(url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.order.refresh_from_db()
        self.assertEqual(self.order.completed_sessions, 1)

    def test_client_cannot_complete(self):
        self.authenticate(self.client_user)

        response = self.client.put(
            reverse('appointment-complete', kwargs={'pk': self.appointments[0].pk}), {}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_status_update(self):
        self.authenticate(self.admin_user)

        response = self.client.put(
            reverse('appointment-update-status', kwargs={'pk': self.appointments[1].pk}),
            {'status': 'completed', 'completion_notes': 'Closed by admin'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['appointment']['status'], 'completed')
        self.assertEqual(response.data['appointment']['completed_sessions'], 1)

    def test_admin_status_update_rejects_unknown_status(self):
        self.authenticate(self.admin_user)

        response = self.client.put(
            reverse('appointment-update-status', kwargs={'pk': self.appointments[1].pk}),
            {'status': 'no_show'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reschedule(self):
        self.authenticate(self.admin_user)

        response = self.client.put(
            reverse('appointment-reschedule', kwargs={'pk': self.appointments[2].pk}),
            {'scheduled_at': '2030-01-20T15:00:00'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['appointment']['status'], 'rescheduled')
        self.appointments[2].refresh_from_db()
        self.assertEqual(self.appointments[2].scheduled_at, datetime(2030, 1, 20, 15, 0))

    def test_missing_appointment(self):
        self.authenticate(self.admin_user)

        response = self.client.put(reverse('appointment-complete', kwargs={'pk': 999999}), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['kind'], 'not_found')
