# clients/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.db import transaction
import logging

from users.models import User
from .models import Client

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_client_profile(sender, instance, created, **kwargs):
    """
    Create Client profile when a new user with type 'Client' is created
    """
    if created and instance.user_type == 'Client':
        try:
            with transaction.atomic():
                Client.objects.create(user=instance)
                logger.info(f"Client profile created for user: {instance.email}")
        except Exception as e:
            logger.error(f"Failed to create client profile for user {instance.email}: {str(e)}")
            # Don't raise the exception to avoid breaking user creation
