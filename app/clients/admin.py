# clients/admin.py
from django.contrib import admin

from .models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_email', 'full_name', 'phone_number', 'created_at']
    search_fields = ['user__email', 'full_name', 'phone_number']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['user']

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = 'Email'
    user_email.admin_order_field = 'user__email'
