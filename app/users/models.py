# users/models.py
import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils.translation import gettext_lazy as _

from .managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model where email is the unique identifier.

    Tokens issued to these users (rest_framework.authtoken) identify the
    acting client or administrator on every booking request.
    """

    # User Type Choices
    USER_TYPE_CHOICES = [
        ('Client', _('Client')),
        ('Doctor', _('Doctor')),
        ('Admin', _('Admin')),
    ]

    # Primary fields
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text=_("Unique identifier for the user")
    )
    email = models.EmailField(
        _('email address'),
        unique=True,
        help_text=_("User's email address, used for login")
    )
    user_type = models.CharField(
        max_length=20,
        choices=USER_TYPE_CHOICES,
        help_text=_("Type of user: Client, Doctor, or Admin")
    )

    # Status fields
    is_active = models.BooleanField(
        _('active'),
        default=True,
        help_text=_("Designates whether this user should be treated as active.")
    )
    is_staff = models.BooleanField(
        _('staff status'),
        default=False,
        help_text=_("Designates whether the user can log into the admin site.")
    )

    # Timestamp fields
    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True
    )
    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True
    )

    # Custom manager
    objects = UserManager()

    # Django auth settings
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['user_type']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        db_table = 'users'
        indexes = [
            models.Index(fields=['user_type'], name='users_user_type_idx'),
            models.Index(fields=['created_at'], name='users_created_at_idx'),
        ]

    def __str__(self):
        return f"{self.email} ({self.user_type})"

    @property
    def is_client(self):
        """Check if user is a client"""
        return self.user_type == 'Client'

    @property
    def is_admin(self):
        """Check if user is an admin"""
        return self.user_type == 'Admin'

    @property
    def is_platform_admin(self):
        """Admins manage orders and appointments; staff accounts count as admins"""
        return self.is_admin or self.is_staff
