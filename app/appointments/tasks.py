# appointments/tasks.py
from celery import shared_task
import logging

from .services import AvailabilityCalendarService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def expire_past_slots_task(self):
    """
    Deactivate unbooked availability slots whose date has passed.
    Runs daily via cron schedule
    """
    try:
        expired = AvailabilityCalendarService().expire_past_slots()
        logger.info(f"Slot expiry completed: {expired} slot(s) deactivated")
        return {'success': True, 'expired_count': expired}
    except Exception as e:
        logger.error(f"Slot expiry task error: {str(e)}")
        raise self.retry(exc=e)
