# factories/users.py
import factory

from users.models import User
from clients.models import Client
from .base import BaseFactory, hashed_test_password


class UserFactory(BaseFactory):
    """
    Factory for creating User instances
    """

    class Meta:
        model = User
        django_get_or_create = ('email',)  # Avoid duplicate emails

    email = factory.Sequence(lambda n: f'user{n}@example.com')
    password = factory.LazyFunction(hashed_test_password)
    user_type = 'Client'
    is_active = True

    # Staff status only for admins
    is_staff = factory.LazyAttribute(lambda obj: obj.user_type == 'Admin')


class ClientUserFactory(UserFactory):
    """Client users; the profile row comes from clients.signals"""
    email = factory.Sequence(lambda n: f'client{n}@example.com')
    user_type = 'Client'


class DoctorUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f'doctor{n}@example.com')
    user_type = 'Doctor'


class AdminUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f'admin{n}@example.com')
    user_type = 'Admin'


class ClientFactory(BaseFactory):
    """
    Returns the signal-created profile of a fresh client user
    """

    class Meta:
        model = Client
        django_get_or_create = ('user',)

    user = factory.SubFactory(ClientUserFactory)
    full_name = factory.Faker('name')
