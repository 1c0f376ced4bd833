# appointments/serializers.py
from decimal import Decimal
from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from .models import (
    Appointment,
    AvailabilitySlot,
    Order,
    Session,
    APPOINTMENT_STATUS_CHOICES,
    ORDER_STATUS_CHOICES,
    SESSION_STATUS_CHOICES,
    SLOT_STATUS_CHOICES,
)


class StrictFieldsMixin:
    """
    Reject request keys that the serializer does not declare
    """

    def to_internal_value(self, data):
        if hasattr(data, 'keys'):
            unknown = sorted(set(data.keys()) - set(self.fields.keys()))
            if unknown:
                raise serializers.ValidationError({
                    field: [_("Unknown field.")] for field in unknown
                })
        return super().to_internal_value(data)


# ============================================================================
# OUTPUT SERIALIZERS
# ============================================================================

class AvailabilitySlotSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source='doctor.full_name', read_only=True)

    class Meta:
        model = AvailabilitySlot
        fields = [
            'id',
            'doctor',
            'doctor_name',
            'available_date',
            'start_time',
            'end_time',
            'status',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class AppointmentSerializer(serializers.ModelSerializer):
    """
    Appointment with the progress of its order
    """
    order_id = serializers.IntegerField(read_only=True)
    availability_id = serializers.IntegerField(read_only=True, allow_null=True)
    client_id = serializers.IntegerField(source='order.client_id', read_only=True)
    doctor_id = serializers.IntegerField(source='order.doctor_id', read_only=True)
    doctor_name = serializers.CharField(source='order.doctor.full_name', read_only=True)
    service_name = serializers.CharField(source='order.service.name', read_only=True)
    order_status = serializers.CharField(source='order.status', read_only=True)
    number_of_sessions = serializers.IntegerField(source='order.number_of_sessions', read_only=True)
    completed_sessions = serializers.IntegerField(source='order.completed_sessions', read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id',
            'order_id',
            'availability_id',
            'session_number',
            'scheduled_at',
            'status',
            'notes',
            'completion_notes',
            'client_id',
            'doctor_id',
            'doctor_name',
            'service_name',
            'order_status',
            'number_of_sessions',
            'completed_sessions',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class OrderAppointmentSerializer(serializers.ModelSerializer):
    availability_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Appointment
        fields = ['id', 'availability_id', 'session_number', 'scheduled_at', 'status']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(read_only=True)
    doctor_id = serializers.IntegerField(read_only=True)
    service_id = serializers.IntegerField(read_only=True)
    doctor_name = serializers.CharField(source='doctor.full_name', read_only=True)
    service_name = serializers.CharField(source='service.name', read_only=True)
    appointments = OrderAppointmentSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'client_id',
            'doctor_id',
            'doctor_name',
            'service_id',
            'service_name',
            'number_of_sessions',
            'completed_sessions',
            'amount',
            'payment_method',
            'payment_status',
            'paid_at',
            'status',
            'notes',
            'started_at',
            'completed_at',
            'appointments',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SessionSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Session
        fields = ['id', 'order_id', 'scheduled_at', 'status', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields


# ============================================================================
# ORDER REQUESTS
# ============================================================================

class OrderCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    """
    Booking request. Clients book for themselves; admins must name the client.
    """
    client_id = serializers.IntegerField(required=False, min_value=1)
    doctor_id = serializers.IntegerField(min_value=1)
    service_id = serializers.IntegerField(min_value=1)
    number_of_sessions = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    payment_method = serializers.CharField(required=False, max_length=50)
    payment_status = serializers.CharField(required=False, max_length=50)
    availability_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_empty=True
    )
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        slot_ids = attrs.get('availability_ids')
        if slot_ids is not None and len(slot_ids) != attrs['number_of_sessions']:
            raise serializers.ValidationError({
                'availability_ids': _("Number of availability slots must equal number_of_sessions")
            })
        return attrs


class OrderUpdateSerializer(StrictFieldsMixin, serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.CharField(required=False, max_length=50)
    payment_status = serializers.CharField(required=False, max_length=50)
    paid_at = serializers.DateTimeField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    number_of_sessions = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(_("At least one field is required"))
        return attrs


class OrderStatusSerializer(StrictFieldsMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES)


# ============================================================================
# APPOINTMENT REQUESTS
# ============================================================================

class AppointmentCancelSerializer(StrictFieldsMixin, serializers.Serializer):
    pass


class AppointmentCompleteSerializer(StrictFieldsMixin, serializers.Serializer):
    completion_notes = serializers.CharField(required=False, allow_blank=True)


class AppointmentStatusSerializer(StrictFieldsMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=APPOINTMENT_STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)
    completion_notes = serializers.CharField(required=False, allow_blank=True)


class AppointmentRescheduleSerializer(StrictFieldsMixin, serializers.Serializer):
    scheduled_at = serializers.DateTimeField()


class WeekRangeSerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):
        if attrs['start'] > attrs['end']:
            raise serializers.ValidationError(_("start must be on or before end"))
        return attrs


class DoctorAppointmentsQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)


# ============================================================================
# AVAILABILITY REQUESTS
# ============================================================================

class AvailabilityCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    doctor_id = serializers.IntegerField(min_value=1)
    available_date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    status = serializers.ChoiceField(choices=SLOT_STATUS_CHOICES, required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if attrs['start_time'] >= attrs['end_time']:
            raise serializers.ValidationError({'end_time': _("End time must be after start time")})
        return attrs


class AvailabilityUpdateSerializer(StrictFieldsMixin, serializers.Serializer):
    available_date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    status = serializers.ChoiceField(choices=SLOT_STATUS_CHOICES, required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(_("At least one field is required"))
        return attrs


class AvailabilityFilterSerializer(serializers.Serializer):
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=SLOT_STATUS_CHOICES, required=False)
    isActive = serializers.BooleanField(required=False, allow_null=True, default=None)


# ============================================================================
# SESSION REQUESTS
# ============================================================================

class SessionCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    scheduled_at = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=SESSION_STATUS_CHOICES, required=False)


class SessionUpdateSerializer(StrictFieldsMixin, serializers.Serializer):
    scheduled_at = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=SESSION_STATUS_CHOICES, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(_("At least one field is required"))
        return attrs


class SessionStatusSerializer(StrictFieldsMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=SESSION_STATUS_CHOICES)
