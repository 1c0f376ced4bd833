# doctors/admin.py
from django.contrib import admin

from .models import Doctor


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ['id', 'full_name', 'email', 'specialty', 'is_active', 'created_at']
    list_filter = ['is_active', 'specialty']
    search_fields = ['full_name', 'email', 'specialty']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['user']
