# appointments/models.py
from datetime import datetime
from decimal import Decimal
from django.db import models
from django.utils.translation import gettext_lazy as _
from django.core.validators import MinValueValidator
from django.core.exceptions import ValidationError

from clients.models import Client
from doctors.models import Doctor
from catalog.models import Service


# Order states and the only moves allowed between them. Every entry point
# (HTTP and services) checks against this table; session-derived status only
# respects its terminal states.
ORDER_STATUS_CHOICES = [
    ('pending', _('Pending')),
    ('confirmed', _('Confirmed')),
    ('in_progress', _('In Progress')),
    ('completed', _('Completed')),
    ('cancelled', _('Cancelled')),
]

ORDER_STATUS_TRANSITIONS = {
    'pending': frozenset({'confirmed', 'cancelled'}),
    'confirmed': frozenset({'in_progress', 'completed', 'cancelled'}),
    'in_progress': frozenset({'completed', 'cancelled'}),
    'completed': frozenset(),
    'cancelled': frozenset(),
}

APPOINTMENT_STATUS_CHOICES = [
    ('pending', _('Pending')),
    ('confirmed', _('Confirmed')),
    ('completed', _('Completed')),
    ('cancelled', _('Cancelled')),
    ('rescheduled', _('Rescheduled')),
]

# completed and cancelled accept no further lifecycle moves; administrative
# status updates may still override them (see AppointmentLifecycleService).
APPOINTMENT_STATUS_TRANSITIONS = {
    'pending': frozenset({'confirmed', 'completed', 'cancelled', 'rescheduled'}),
    'confirmed': frozenset({'pending', 'completed', 'cancelled', 'rescheduled'}),
    'rescheduled': frozenset({'pending', 'confirmed', 'completed', 'cancelled', 'rescheduled'}),
    'completed': frozenset(),
    'cancelled': frozenset(),
}

SESSION_STATUS_CHOICES = [
    ('pending', _('Pending')),
    ('confirmed', _('Confirmed')),
    ('completed', _('Completed')),
    ('cancelled', _('Cancelled')),
]

SLOT_STATUS_CHOICES = [
    ('available', _('Available')),
    ('booked', _('Booked')),
    ('blocked', _('Blocked')),
]


class AvailabilitySlot(models.Model):
    """
    A bookable block of time published by a doctor.

    A slot moves from available to booked exactly once, when an order
    reserves it, and is referenced by at most one appointment afterwards.
    """

    STATUS_AVAILABLE = 'available'
    STATUS_BOOKED = 'booked'
    STATUS_BLOCKED = 'blocked'
    STATUS_CHOICES = SLOT_STATUS_CHOICES

    doctor = models.ForeignKey(
        Doctor,
        on_delete=models.CASCADE,
        related_name='availability_slots',
        help_text=_("Doctor who published this slot")
    )

    available_date = models.DateField(
        _('available date'),
        help_text=_("Calendar date of the slot")
    )
    start_time = models.TimeField(
        _('start time'),
        help_text=_("Local start time")
    )
    end_time = models.TimeField(
        _('end time'),
        help_text=_("Local end time, after start time")
    )

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_AVAILABLE,
        help_text=_("Booking state of the slot")
    )
    is_active = models.BooleanField(
        _('is active'),
        default=True,
        help_text=_("Inactive slots cannot be reserved")
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Availability Slot')
        verbose_name_plural = _('Availability Slots')
        db_table = 'doctor_availability'
        ordering = ['available_date', 'start_time']
        indexes = [
            models.Index(fields=['doctor', 'available_date', 'start_time'], name='avail_doctor_date_start_idx'),
            models.Index(fields=['doctor', 'status', 'is_active'], name='avail_doctor_status_idx'),
            models.Index(fields=['available_date', 'status'], name='avail_date_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'available_date', 'start_time', 'end_time'],
                name='unique_doctor_availability_slot'
            ),
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='availability_end_time_after_start_time'
            ),
        ]

    def __str__(self):
        return f"{self.doctor} - {self.available_date} {self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError({'end_time': _("End time must be after start time")})

    @property
    def starts_at(self):
        """Naive local datetime of the slot start"""
        return datetime.combine(self.available_date, self.start_time)

    @property
    def is_bookable(self):
        return self.status == self.STATUS_AVAILABLE and self.is_active


class Order(models.Model):
    """
    A client's purchase of a multi-session service from one doctor
    """

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = ORDER_STATUS_CHOICES

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name='orders',
        help_text=_("Client who placed the order")
    )
    doctor = models.ForeignKey(
        Doctor,
        on_delete=models.PROTECT,
        related_name='orders',
        help_text=_("Doctor delivering the sessions")
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        related_name='orders',
        help_text=_("Purchased service")
    )

    number_of_sessions = models.PositiveIntegerField(
        _('number of sessions'),
        validators=[MinValueValidator(1)],
        help_text=_("Sessions purchased; the order has exactly this many appointments once scheduled")
    )
    amount = models.DecimalField(
        _('amount'),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text=_("Amount charged for the order")
    )

    # Payment is recorded, not processed
    payment_method = models.CharField(_('payment method'), max_length=50, default='cash')
    payment_status = models.CharField(_('payment status'), max_length=50, default='pending')
    paid_at = models.DateTimeField(_('paid at'), null=True, blank=True)

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    completed_sessions = models.PositiveIntegerField(
        _('completed sessions'),
        default=0,
        help_text=_("Number of completed appointments, kept in step with appointment status")
    )
    notes = models.TextField(_('notes'), blank=True)

    started_at = models.DateTimeField(_('started at'), null=True, blank=True)
    completed_at = models.DateTimeField(_('completed at'), null=True, blank=True)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Order')
        verbose_name_plural = _('Orders')
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['client', 'status'], name='orders_client_status_idx'),
            models.Index(fields=['doctor', 'status'], name='orders_doctor_status_idx'),
            models.Index(fields=['created_at'], name='orders_created_at_idx'),
        ]

    def __str__(self):
        return f"Order #{self.pk} - {self.client} with {self.doctor} ({self.status})"

    @property
    def is_terminal(self):
        return not ORDER_STATUS_TRANSITIONS.get(self.status)

    def can_transition_to(self, new_status):
        return new_status in ORDER_STATUS_TRANSITIONS.get(self.status, frozenset())

    @property
    def remaining_sessions(self):
        return max(self.number_of_sessions - self.completed_sessions, 0)


class Appointment(models.Model):
    """
    One scheduled session of an order
    """

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_RESCHEDULED = 'rescheduled'
    STATUS_CHOICES = APPOINTMENT_STATUS_CHOICES

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='appointments',
        help_text=_("Order this appointment belongs to")
    )
    availability = models.OneToOneField(
        AvailabilitySlot,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='appointment',
        help_text=_("Reserved slot, when the order was booked against published availability")
    )

    session_number = models.PositiveIntegerField(
        _('session number'),
        validators=[MinValueValidator(1)],
        help_text=_("1-based position of this session within the order")
    )
    scheduled_at = models.DateTimeField(
        _('scheduled at'),
        help_text=_("Local date and time of the session")
    )
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    notes = models.TextField(_('notes'), blank=True)
    completion_notes = models.TextField(_('completion notes'), blank=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Appointment')
        verbose_name_plural = _('Appointments')
        db_table = 'appointments'
        ordering = ['order', 'session_number']
        indexes = [
            models.Index(fields=['order', 'status'], name='appt_order_status_idx'),
            models.Index(fields=['scheduled_at'], name='appt_scheduled_at_idx'),
            models.Index(fields=['status'], name='appt_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['order', 'session_number'],
                name='unique_order_session_number'
            ),
        ]

    def __str__(self):
        return f"Appointment {self.session_number}/{self.order.number_of_sessions} of order #{self.order_id} ({self.status})"

    @property
    def is_terminal(self):
        return not APPOINTMENT_STATUS_TRANSITIONS.get(self.status)

    def can_transition_to(self, new_status):
        return new_status in APPOINTMENT_STATUS_TRANSITIONS.get(self.status, frozenset())

    def can_be_cancelled(self):
        return self.can_transition_to(self.STATUS_CANCELLED)


class Session(models.Model):
    """
    Session record tracked alongside appointments; its statuses drive the
    derived order status.
    """

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = SESSION_STATUS_CHOICES

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='sessions'
    )
    scheduled_at = models.DateTimeField(_('scheduled at'))
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    notes = models.TextField(_('notes'), blank=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Session')
        verbose_name_plural = _('Sessions')
        db_table = 'sessions'
        ordering = ['scheduled_at']
        indexes = [
            models.Index(fields=['order', 'status'], name='sessions_order_status_idx'),
        ]

    def __str__(self):
        return f"Session of order #{self.order_id} at {self.scheduled_at} ({self.status})"
