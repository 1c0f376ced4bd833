from decimal import Decimal

from django.test import TestCase

from catalog.services import ServiceCatalog, ServiceInfo
from factories.scheduling import ServiceFactory


class ServiceCatalogTests(TestCase):

    def test_lookup_returns_limits(self):
        service = ServiceFactory(number_of_sessions=6, price=Decimal('720.00'))

        info = ServiceCatalog().lookup(service.pk)

        self.assertEqual(info, ServiceInfo(service_id=service.pk, max_sessions=6, price=Decimal('720.00')))

    def test_lookup_unknown_service(self):
        self.assertIsNone(ServiceCatalog().lookup(999999))
