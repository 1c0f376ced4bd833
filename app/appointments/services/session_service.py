# appointments/services/session_service.py
import logging
from typing import Optional

from ..models import Order, Session
from .aggregate_service import AggregateConsistencyService
from .exceptions import ResourceNotFoundError
from .unit_of_work import UnitOfWork
from .validation import coerce_datetime, reject_unknown_fields, require_choice

logger = logging.getLogger(__name__)


class SessionService:
    """
    Session records of an order. Session status changes re-derive the order
    status in the same transaction.
    """

    UPDATABLE_FIELDS = ('scheduled_at', 'notes', 'status')

    def __init__(self, uow: Optional[UnitOfWork] = None,
                 aggregates: Optional[AggregateConsistencyService] = None):
        self.uow = uow or UnitOfWork()
        self.aggregates = aggregates or AggregateConsistencyService(uow=self.uow)

    def create_session(self, order_id, scheduled_at, notes='', status=Session.STATUS_PENDING) -> Session:
        scheduled_at = coerce_datetime('scheduled_at', scheduled_at)
        require_choice('status', status, Session.STATUS_CHOICES)

        with self.uow.atomic():
            if not self.uow.query(Order).filter(pk=order_id).exists():
                raise ResourceNotFoundError("Order not found")

            session = self.uow.query(Session).create(
                order_id=order_id,
                scheduled_at=scheduled_at,
                notes=notes or '',
                status=status,
            )
            if status in (Session.STATUS_COMPLETED, Session.STATUS_CANCELLED):
                self.aggregates.derive_order_status_from_sessions(order_id)

        logger.info(f"Session {session.pk} created for order {order_id}")
        return session

    def list_for_order(self, order_id):
        if not self.uow.query(Order).filter(pk=order_id).exists():
            raise ResourceNotFoundError("Order not found")
        return self.uow.query(Session).filter(order_id=order_id).order_by('scheduled_at', 'pk')

    def get_session(self, session_id) -> Session:
        try:
            return self.uow.query(Session).select_related('order').get(pk=session_id)
        except Session.DoesNotExist:
            raise ResourceNotFoundError("Session not found")

    def update_session(self, session_id, **fields) -> Session:
        reject_unknown_fields(fields, self.UPDATABLE_FIELDS)
        new_status = fields.pop('status', None)

        with self.uow.atomic():
            session = self._lock(session_id)
            if 'scheduled_at' in fields:
                session.scheduled_at = coerce_datetime('scheduled_at', fields['scheduled_at'])
            if 'notes' in fields:
                session.notes = fields['notes'] or ''
            if fields:
                session.save(update_fields=list(fields) + ['updated_at'])
            if new_status is not None:
                session = self.update_status(session_id, new_status)

        logger.info(f"Session {session_id} updated")
        return session

    def update_status(self, session_id, status) -> Session:
        require_choice('status', status, Session.STATUS_CHOICES)

        with self.uow.atomic():
            session = self._lock(session_id)
            old_status = session.status
            session.status = status
            session.save(update_fields=['status', 'updated_at'])

            self.aggregates.derive_order_status_from_sessions(session.order_id)

        logger.info(f"Session {session_id} status changed: {old_status} -> {status}")
        return session

    def delete_session(self, session_id) -> None:
        with self.uow.atomic():
            session = self._lock(session_id)
            session.delete()

        logger.info(f"Session {session_id} deleted")

    def _lock(self, session_id) -> Session:
        try:
            return self.uow.query(Session).select_for_update().get(pk=session_id)
        except Session.DoesNotExist:
            raise ResourceNotFoundError("Session not found")
