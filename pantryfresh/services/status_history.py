from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from ..models.order_status_history import OrderStatusHistory
from .order_status import OrderStatus


class StatusHistoryLog:
    """Append-only audit trail of order status changes."""

    @staticmethod
    def record(
        session: Session,
        *,
        order_id: int,
        old_status: Optional[OrderStatus],
        new_status: OrderStatus,
        changed_by: Optional[int],
        notes: Optional[str] = None,
    ) -> OrderStatusHistory:
        entry = OrderStatusHistory(
            order_id=order_id,
            old_status=OrderStatus(old_status) if old_status is not None else None,
            new_status=OrderStatus(new_status),
            changed_by=changed_by,
            notes=notes,
            changed_at=datetime.now(),
        )
        session.add(entry)
        session.flush()
        return entry

    @staticmethod
    def list_for_order(session: Session, order_id: int) -> List[OrderStatusHistory]:
        """Entries for one order, newest first."""
        return (
            session.query(OrderStatusHistory)
            .filter(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.changed_at.desc(), OrderStatusHistory.id.desc())
            .all()
        )
