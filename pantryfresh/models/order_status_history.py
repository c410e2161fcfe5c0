from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from .base import Base
from ..services.order_status import OrderStatus


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("order.id"), nullable=False, index=True)
    # null only for the entry written when the order is created
    old_status = Column(Enum(OrderStatus, native_enum=False, length=32), nullable=True)
    new_status = Column(Enum(OrderStatus, native_enum=False, length=32), nullable=False)
    notes = Column(Text, nullable=True)
    changed_by = Column(Integer, nullable=True)
    changed_at = Column(DateTime, nullable=False)

    order = relationship("Order", back_populates="status_history")
