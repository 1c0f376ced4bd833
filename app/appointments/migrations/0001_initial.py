from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('clients', '0001_initial'),
        ('doctors', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AvailabilitySlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('available_date', models.DateField(help_text='Calendar date of the slot', verbose_name='available date')),
                ('start_time', models.TimeField(help_text='Local start time', verbose_name='start time')),
                ('end_time', models.TimeField(help_text='Local end time, after start time', verbose_name='end time')),
                ('status', models.CharField(choices=[('available', 'Available'), ('booked', 'Booked'), ('blocked', 'Blocked')], default='available', help_text='Booking state of the slot', max_length=20, verbose_name='status')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive slots cannot be reserved', verbose_name='is active')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('doctor', models.ForeignKey(help_text='Doctor who published this slot', on_delete=django.db.models.deletion.CASCADE, related_name='availability_slots', to='doctors.doctor')),
            ],
            options={
                'verbose_name': 'Availability Slot',
                'verbose_name_plural': 'Availability Slots',
                'db_table': 'doctor_availability',
                'ordering': ['available_date', 'start_time'],
                'indexes': [
                    models.Index(fields=['doctor', 'available_date', 'start_time'], name='avail_doctor_date_start_idx'),
                    models.Index(fields=['doctor', 'status', 'is_active'], name='avail_doctor_status_idx'),
                    models.Index(fields=['available_date', 'status'], name='avail_date_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('doctor', 'available_date', 'start_time', 'end_time'), name='unique_doctor_availability_slot'),
                    models.CheckConstraint(condition=models.Q(('end_time__gt', models.F('start_time'))), name='availability_end_time_after_start_time'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number_of_sessions', models.PositiveIntegerField(help_text='Sessions purchased; the order has exactly this many appointments once scheduled', validators=[django.core.validators.MinValueValidator(1)], verbose_name='number of sessions')),
                ('amount', models.DecimalField(decimal_places=2, help_text='Amount charged for the order', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='amount')),
                ('payment_method', models.CharField(default='cash', max_length=50, verbose_name='payment method')),
                ('payment_status', models.CharField(default='pending', max_length=50, verbose_name='payment status')),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='paid at')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20, verbose_name='status')),
                ('completed_sessions', models.PositiveIntegerField(default=0, help_text='Number of completed appointments, kept in step with appointment status', verbose_name='completed sessions')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('started_at', models.DateTimeField(blank=True, null=True, verbose_name='started at')),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='completed at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('client', models.ForeignKey(help_text='Client who placed the order', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='clients.client')),
                ('doctor', models.ForeignKey(help_text='Doctor delivering the sessions', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='doctors.doctor')),
                ('service', models.ForeignKey(help_text='Purchased service', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='catalog.service')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'db_table': 'orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['client', 'status'], name='orders_client_status_idx'),
                    models.Index(fields=['doctor', 'status'], name='orders_doctor_status_idx'),
                    models.Index(fields=['created_at'], name='orders_created_at_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('session_number', models.PositiveIntegerField(help_text='1-based position of this session within the order', validators=[django.core.validators.MinValueValidator(1)], verbose_name='session number')),
                ('scheduled_at', models.DateTimeField(help_text='Local date and time of the session', verbose_name='scheduled at')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('rescheduled', 'Rescheduled')], default='pending', max_length=20, verbose_name='status')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('completion_notes', models.TextField(blank=True, verbose_name='completion notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('availability', models.OneToOneField(blank=True, help_text='Reserved slot, when the order was booked against published availability', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='appointment', to='appointments.availabilityslot')),
                ('order', models.ForeignKey(help_text='Order this appointment belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='appointments.order')),
            ],
            options={
                'verbose_name': 'Appointment',
                'verbose_name_plural': 'Appointments',
                'db_table': 'appointments',
                'ordering': ['order', 'session_number'],
                'indexes': [
                    models.Index(fields=['order', 'status'], name='appt_order_status_idx'),
                    models.Index(fields=['scheduled_at'], name='appt_scheduled_at_idx'),
                    models.Index(fields=['status'], name='appt_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('order', 'session_number'), name='unique_order_session_number'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('scheduled_at', models.DateTimeField(verbose_name='scheduled at')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20, verbose_name='status')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to='appointments.order')),
            ],
            options={
                'verbose_name': 'Session',
                'verbose_name_plural': 'Sessions',
                'db_table': 'sessions',
                'ordering': ['scheduled_at'],
                'indexes': [
                    models.Index(fields=['order', 'status'], name='sessions_order_status_idx'),
                ],
            },
        ),
    ]
