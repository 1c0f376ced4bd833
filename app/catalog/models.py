# catalog/models.py
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _


class Service(models.Model):
    """
    A purchasable counseling package
    """

    name = models.CharField(
        _('name'),
        max_length=200,
        help_text=_("Display name of the service")
    )
    description = models.TextField(
        _('description'),
        blank=True
    )
    price = models.DecimalField(
        _('price'),
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text=_("List price of the whole package")
    )
    number_of_sessions = models.PositiveIntegerField(
        _('number of sessions'),
        default=1,
        validators=[MinValueValidator(1)],
        help_text=_("Maximum number of sessions an order for this service may request")
    )
    is_active = models.BooleanField(_('active'), default=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Service')
        verbose_name_plural = _('Services')
        db_table = 'services'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.number_of_sessions} sessions)"
