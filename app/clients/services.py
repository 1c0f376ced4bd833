# clients/services.py
import logging
from typing import Optional

from .models import Client
from users.models import User

logger = logging.getLogger(__name__)


class ClientService:
    """
    Resolves the acting client for ownership checks
    """

    @staticmethod
    def get_client_by_user(user: User) -> Optional[Client]:
        """
        Get client profile by user, return None if not found
        """
        if not getattr(user, 'is_authenticated', False):
            return None
        try:
            return Client.objects.select_related('user').get(user=user)
        except Client.DoesNotExist:
            logger.warning(f"Client profile not found for user {user.email}")
            return None

    @staticmethod
    def exists(client_id: int, using: str = 'default') -> bool:
        return Client.objects.using(using).filter(pk=client_id).exists()
