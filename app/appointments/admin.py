# appointments/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Appointment, AvailabilitySlot, Order, Session


class AppointmentInline(admin.TabularInline):
    """Appointments of an order; created by the booking service only"""
    model = Appointment
    extra = 0
    can_delete = False
    fields = ['session_number', 'scheduled_at', 'status', 'availability']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'client', 'doctor', 'service', 'status',
        'progress', 'amount', 'payment_status', 'created_at'
    ]
    list_filter = ['status', 'payment_status', 'created_at']
    search_fields = ['client__user__email', 'client__full_name', 'doctor__full_name']
    raw_id_fields = ['client', 'doctor', 'service']
    readonly_fields = ['completed_sessions', 'started_at', 'completed_at', 'created_at', 'updated_at']
    inlines = [AppointmentInline]

    def progress(self, obj):
        return f"{obj.completed_sessions}/{obj.number_of_sessions}"
    progress.short_description = _('Completed')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'session_number', 'scheduled_at', 'status']
    list_filter = ['status', 'scheduled_at']
    search_fields = ['order__client__user__email', 'order__doctor__full_name']
    raw_id_fields = ['order', 'availability']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'scheduled_at'


@admin.register(AvailabilitySlot)
class AvailabilitySlotAdmin(admin.ModelAdmin):
    list_display = ['id', 'doctor', 'available_date', 'start_time', 'end_time', 'status', 'is_active']
    list_filter = ['status', 'is_active', 'available_date']
    search_fields = ['doctor__full_name']
    raw_id_fields = ['doctor']
    date_hierarchy = 'available_date'


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'scheduled_at', 'status']
    list_filter = ['status']
    raw_id_fields = ['order']
