# factories/base.py
import factory
from django.contrib.auth.hashers import make_password

TEST_PASSWORD = 'testpass123'


class BaseFactory(factory.django.DjangoModelFactory):
    """
    Base factory with common configurations
    """

    class Meta:
        abstract = True


def hashed_test_password():
    """Hashed form of TEST_PASSWORD for user factories"""
    return make_password(TEST_PASSWORD)
