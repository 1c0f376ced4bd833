# clients/models.py
from django.db import models
from django.utils.translation import gettext_lazy as _
from django.core.validators import RegexValidator
from users.models import User


class Client(models.Model):
    """
    Client profile - the party that purchases counseling orders
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='client_profile',
        help_text=_("Link to the base user account")
    )

    full_name = models.CharField(
        _('full name'),
        max_length=200,
        blank=True,
        help_text=_("Client's full name")
    )
    phone_number = models.CharField(
        _('phone number'),
        max_length=20,
        blank=True,
        validators=[
            RegexValidator(
                regex=r'^\+?1?\d{9,15}$',
                message=_("Phone number must be entered in the format: '+999999999'. Up to 15 digits allowed.")
            )
        ],
        help_text=_("Contact phone number")
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Client')
        verbose_name_plural = _('Clients')
        db_table = 'clients'
        indexes = [
            models.Index(fields=['created_at'], name='clients_created_at_idx'),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.user.email})"

    @property
    def display_name(self):
        return self.full_name or self.user.email.split('@')[0]
