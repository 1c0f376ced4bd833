# catalog/services.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .models import Service


@dataclass(frozen=True)
class ServiceInfo:
    """Booking-relevant facts about a service"""
    service_id: int
    max_sessions: int
    price: Decimal


class ServiceCatalog:
    """
    Lookup of service limits used when validating orders
    """

    def __init__(self, using: str = 'default'):
        self.using = using

    def lookup(self, service_id: int) -> Optional[ServiceInfo]:
        """
        Return the service's maximum session count and price, or None if unknown
        """
        row = (
            Service.objects.using(self.using)
            .filter(pk=service_id)
            .values('id', 'number_of_sessions', 'price')
            .first()
        )
        if row is None:
            return None
        return ServiceInfo(
            service_id=row['id'],
            max_sessions=row['number_of_sessions'],
            price=row['price'],
        )
