from sqlalchemy import Column, Date, DateTime, Enum, Integer, JSON, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from .base import Base
from ..services.order_status import OrderStatus


class Order(Base):
    """A placed order. Only status, payment status and cancellation fields change after insert."""

    __tablename__ = "order"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(32), nullable=False, unique=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(Enum(OrderStatus, native_enum=False, length=32), nullable=False)
    payment_method = Column(String(16), nullable=False)
    payment_status = Column(String(32), nullable=False)
    # snapshot of the address at checkout, never a live reference
    delivery_address = Column(JSON, nullable=False)
    delivery_date = Column(Date, nullable=True)
    delivery_slot = Column(String(16), nullable=True)
    order_notes = Column(Text, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    delivery_fee = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")
    status_history = relationship("OrderStatusHistory", back_populates="order")
