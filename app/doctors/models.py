# doctors/models.py
from django.db import models
from django.utils.translation import gettext_lazy as _
from users.models import User


class Doctor(models.Model):
    """
    Doctor profile. Doctors publish availability slots and receive orders.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='doctor_profile',
        help_text=_("Login account of the doctor, if any")
    )
    full_name = models.CharField(
        _('full name'),
        max_length=200,
        help_text=_("Doctor's full name")
    )
    email = models.EmailField(
        _('email address'),
        blank=True,
        help_text=_("Contact email")
    )
    specialty = models.CharField(
        _('specialty'),
        max_length=200,
        blank=True,
        help_text=_("Counseling specialty")
    )
    is_active = models.BooleanField(
        _('active'),
        default=True,
        help_text=_("Inactive doctors cannot receive new orders")
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Doctor')
        verbose_name_plural = _('Doctors')
        db_table = 'doctors'
        ordering = ['full_name']
        indexes = [
            models.Index(fields=['is_active'], name='doctors_is_active_idx'),
        ]

    def __str__(self):
        return f"Dr. {self.full_name}"
