import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Doctor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(help_text="Doctor's full name", max_length=200, verbose_name='full name')),
                ('email', models.EmailField(blank=True, help_text='Contact email', max_length=254, verbose_name='email address')),
                ('specialty', models.CharField(blank=True, help_text='Counseling specialty', max_length=200, verbose_name='specialty')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive doctors cannot receive new orders', verbose_name='active')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('user', models.OneToOneField(blank=True, help_text='Login account of the doctor, if any', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='doctor_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Doctor',
                'verbose_name_plural': 'Doctors',
                'db_table': 'doctors',
                'ordering': ['full_name'],
                'indexes': [
                    models.Index(fields=['is_active'], name='doctors_is_active_idx'),
                ],
            },
        ),
    ]
