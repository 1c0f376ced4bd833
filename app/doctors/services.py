# doctors/services.py
import logging
from typing import Optional

from .models import Doctor

logger = logging.getLogger(__name__)


class DoctorDirectory:
    """
    Read-only access to doctor profiles for the booking engine
    """

    def __init__(self, using: str = 'default'):
        self.using = using

    def _queryset(self):
        return Doctor.objects.using(self.using)

    def exists(self, doctor_id: int) -> bool:
        return self._queryset().filter(pk=doctor_id).exists()

    def is_active(self, doctor_id: int) -> bool:
        return self._queryset().filter(pk=doctor_id, is_active=True).exists()

    def get(self, doctor_id: int) -> Optional[Doctor]:
        try:
            return self._queryset().get(pk=doctor_id)
        except Doctor.DoesNotExist:
            logger.debug(f"Doctor {doctor_id} not found")
            return None
