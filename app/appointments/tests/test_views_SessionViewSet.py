# appointments/tests/test_views_SessionViewSet.py
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from users.models import User
from clients.models import Client
from appointments.models import Order, Session
from factories.scheduling import OrderFactory, SessionFactory


class SessionViewSetTestCase(APITestCase):
    """
    Test cases for SessionViewSet
    """

    def setUp(self):
        self.client_user = User.objects.create_client(email='client@test.com', password='testpass123')
        self.client_profile = Client.objects.get(user=self.client_user)
        self.other_user = User.objects.create_client(email='other@test.com', password='testpass123')
        self.admin_user = User.objects.create_admin(email='admin@test.com', password='testpass123')

        self.order = OrderFactory(
            client=self.client_profile, number_of_sessions=2, status=Order.STATUS_CONFIRMED
        )

    def authenticate(self, user):
        token, _ = Token.objects.get_or_create(user=user)
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')

    def test_admin_creates_session(self):
        self.authenticate(self.admin_user)

        response = self.client.post(reverse('session-list'), {
            'order_id': self.order.pk,
            'scheduled_at': '2030-05-01T10:00:00',
            'notes': 'Intake',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['session']['order_id'], self.order.pk)
        self.assertEqual(response.data['session']['status'], 'pending')

    def test_create_for_missing_order(self):
        self.authenticate(self.admin_user)

        response = self.client.post(reverse('session-list'), {
            'order_id': 999999,
            'scheduled_at': '2030-05-01T10:00:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_order_sessions_visible_to_owner_only(self):
        SessionFactory(order=self.order)
        SessionFactory(order=self.order)
        url = reverse('session-order', kwargs={'order_id': self.order.pk})

        self.authenticate(self.client_user)
        own = self.client.get(url)
        self.authenticate(self.other_user)
        foreign = self.client.get(url)

        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual(own.data['count'], 2)
        self.assertEqual(foreign.status_code, status.HTTP_403_FORBIDDEN)

    def test_retrieve_session(self):
        session = SessionFactory(order=self.order)
        self.authenticate(self.client_user)

        response = self.client.get(reverse('session-detail', kwargs={'pk': session.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], session.pk)

    def test_status_changes_derive_order_status(self):
        first, second = SessionFactory(order=self.order), SessionFactory(order=self.order)
        self.authenticate(self.admin_user)

        response = self.client.patch(
            reverse('session-update-status', kwargs={'pk': first.pk}), {'status': 'completed'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)

        self.client.patch(
            reverse('session-update-status', kwargs={'pk': second.pk}), {'status': 'completed'}, format='json'
        )
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_COMPLETED)

    def test_update_and_delete_session(self):
        session = SessionFactory(order=self.order)
        self.authenticate(self.admin_user)
        url = reverse('session-detail', kwargs={'pk': session.pk})

        updated = self.client.put(url, {'notes': 'Bring worksheet'}, format='json')
        deleted = self.client.delete(url)

        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data['session']['notes'], 'Bring worksheet')
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Session.objects.filter(pk=session.pk).exists())

    def test_client_cannot_change_session_status(self):
        session = SessionFactory(order=self.order)
        self.authenticate(self.client_user)

        response = self.client.patch(
            reverse('session-update-status', kwargs={'pk': session.pk}), {'status': 'cancelled'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
