# factories/scheduling.py
from datetime import datetime, time, timedelta
from decimal import Decimal

import factory
from django.utils import timezone

from doctors.models import Doctor
from catalog.models import Service
from appointments.models import Appointment, AvailabilitySlot, Order, Session
from .base import BaseFactory
from .users import ClientFactory


class DoctorFactory(BaseFactory):
    class Meta:
        model = Doctor

    full_name = factory.Faker('name')
    email = factory.Sequence(lambda n: f'dr{n}@clinic.example.com')
    specialty = factory.Faker('random_element', elements=[
        'Family counseling', 'Anxiety', 'Couples therapy', 'Career guidance'
    ])
    is_active = True


class ServiceFactory(BaseFactory):
    class Meta:
        model = Service

    name = factory.Sequence(lambda n: f'Counseling package {n}')
    price = Decimal('500.00')
    number_of_sessions = 10
    is_active = True


class AvailabilitySlotFactory(BaseFactory):
    """
    One-hour slots on consecutive future days, so repeated builds for the
    same doctor never collide on the unique slot key
    """

    class Meta:
        model = AvailabilitySlot

    doctor = factory.SubFactory(DoctorFactory)
    available_date = factory.Sequence(lambda n: timezone.now().date() + timedelta(days=7 + n))
    start_time = time(9, 0)
    end_time = time(10, 0)
    status = AvailabilitySlot.STATUS_AVAILABLE
    is_active = True


class OrderFactory(BaseFactory):
    class Meta:
        model = Order

    client = factory.SubFactory(ClientFactory)
    doctor = factory.SubFactory(DoctorFactory)
    service = factory.SubFactory(ServiceFactory)
    number_of_sessions = 3
    amount = Decimal('300.00')
    status = Order.STATUS_PENDING


class AppointmentFactory(BaseFactory):
    class Meta:
        model = Appointment

    order = factory.SubFactory(OrderFactory)
    session_number = factory.Sequence(lambda n: n + 1)
    scheduled_at = factory.LazyAttribute(
        lambda obj: datetime.combine(timezone.now().date() + timedelta(days=7 * obj.session_number), time(10, 0))
    )
    status = Appointment.STATUS_PENDING


class SessionFactory(BaseFactory):
    class Meta:
        model = Session

    order = factory.SubFactory(OrderFactory)
    scheduled_at = factory.LazyFunction(lambda: datetime.combine(timezone.now().date() + timedelta(days=7), time(10, 0)))
    status = Session.STATUS_PENDING
