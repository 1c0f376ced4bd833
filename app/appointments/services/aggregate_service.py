# appointments/services/aggregate_service.py
import logging
from typing import Optional

from django.db.models import Count, Q
from django.utils import timezone

from ..models import Appointment, Order, Session
from .exceptions import ResourceNotFoundError
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AggregateConsistencyService:
    """
    Keeps order-level derived data in step with appointments and sessions.

    Both operations open ``uow.atomic()``; called from inside a status write
    they join that transaction, so the derived value commits with it.
    """

    def __init__(self, uow: Optional[UnitOfWork] = None):
        self.uow = uow or UnitOfWork()

    def recompute_completed_sessions(self, order_id) -> int:
        """
        Count the order's completed appointments and store it on the order
        """
        with self.uow.atomic():
            completed = self.uow.query(Appointment).filter(
                order_id=order_id,
                status=Appointment.STATUS_COMPLETED,
            ).count()

            updated = self.uow.query(Order).filter(pk=order_id).update(
                completed_sessions=completed,
                updated_at=timezone.now(),
            )
            if updated != 1:
                raise ResourceNotFoundError("Order not found")

        logger.info(f"Order {order_id} completed_sessions recomputed: {completed}")
        return completed

    def derive_order_status_from_sessions(self, order_id) -> str:
        """
        Set the order to completed when all of its sessions are completed, or
        to cancelled when all are cancelled. Any other mix leaves it as is.

        The derived status is written from any non-terminal status; a
        completed or cancelled order keeps its status and a warning is
        logged. Returns the order status after the call.
        """
        with self.uow.atomic():
            try:
                order = self.uow.query(Order).select_for_update().get(pk=order_id)
            except Order.DoesNotExist:
                raise ResourceNotFoundError("Order not found")

            counts = self.uow.query(Session).filter(order_id=order_id).aggregate(
                completed=Count('id', filter=Q(status=Session.STATUS_COMPLETED)),
                cancelled=Count('id', filter=Q(status=Session.STATUS_CANCELLED)),
            )

            target = None
            if counts['completed'] == order.number_of_sessions:
                target = Order.STATUS_COMPLETED
            elif counts['cancelled'] == order.number_of_sessions:
                target = Order.STATUS_CANCELLED

            if target is None or target == order.status:
                return order.status

            if order.is_terminal:
                logger.warning(
                    f"Order {order_id} sessions suggest '{target}' but the order "
                    f"is already '{order.status}'; status kept"
                )
                return order.status

            now = timezone.now()
            fields = {'status': target, 'updated_at': now}
            if target == Order.STATUS_COMPLETED:
                fields['completed_at'] = now
            self.uow.query(Order).filter(pk=order_id, status=order.status).update(**fields)

        logger.info(f"Order {order_id} status derived from sessions: {order.status} -> {target}")
        return target
