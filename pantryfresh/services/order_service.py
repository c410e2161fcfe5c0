from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..errors import CartEmptyError, ConflictError, IllegalTransitionError, NotFoundError, StockValidationError, ValidationError
from ..models.cart import Cart
from ..models.cart_item import CartItem
from ..models.order import Order
from ..models.order_item import OrderItem
from ..utils.dto import to_order_dto
from ..utils.validators import (
    parse_status,
    validate_delivery_address,
    validate_delivery_details,
    validate_discount,
    validate_payment_method,
)
from .logging import log_event
from .order_number import generate_order_number
from .order_status import CANCELLABLE_STATUSES, INITIAL_STATUS, OrderStatus, can_transition, releases_stock
from .status_history import StatusHistoryLog
from .stock_ledger import StockDirection, StockLedger
from .totals import PricingRules, delivery_fee, item_subtotal, order_totals, to_money


class OrderService:
    """Checkout and order lifecycle backed by DB.

    ``create_order``, ``cancel_order`` and ``update_order_status`` each run as
    a single transaction: every step commits together or nothing does.
    """

    def __init__(
        self,
        session_factory,
        pricing: Optional[PricingRules] = None,
        stock_ledger: Optional[StockLedger] = None,
        history: Optional[StatusHistoryLog] = None,
    ):
        self._session_factory = session_factory
        self._pricing = pricing or PricingRules()
        self._ledger = stock_ledger or StockLedger()
        self._history = history or StatusHistoryLog()

    def create_order(
        self,
        *,
        user_id: int,
        delivery_address: dict,
        payment_method: Optional[str] = "COD",
        delivery_date=None,
        delivery_slot: Optional[str] = None,
        order_notes: Optional[str] = None,
        discount=0,
    ) -> Dict:
        """Convert the user's cart into a PENDING order."""
        address = validate_delivery_address(delivery_address)
        method = validate_payment_method(payment_method)
        date_, slot = validate_delivery_details(delivery_date, delivery_slot)
        disc = validate_discount(discount)

        with self._session_factory() as session:
            cart = session.query(Cart).filter(Cart.user_id == user_id).first()
            if cart is None or not cart.items:
                raise CartEmptyError()

            # 1. re-validate against live stock, holding the product rows
            products = self._ledger.lock_products(session, [it.product_id for it in cart.items])
            errors: List[str] = []
            for it in cart.items:
                product = products.get(it.product_id)
                if product is None:
                    errors.append(f"Product {it.product_id} not found")
                elif not product.is_available:
                    errors.append(f"{product.name} is no longer available")
                elif product.stock < it.quantity:
                    errors.append(f"Only {product.stock} units of {product.name} available (requested: {it.quantity})")
            if errors:
                log_event("info", "order.stock_rejected", user_id=user_id, errors=errors)
                raise StockValidationError(errors)

            # 2. order number
            order_number = generate_order_number(session)

            # 3. totals from current prices
            lines = []
            for it in cart.items:
                product = products[it.product_id]
                price = to_money(product.effective_price)
                lines.append(
                    OrderItem(
                        product_id=it.product_id,
                        product_name=product.name,
                        quantity=it.quantity,
                        price=price,
                        subtotal=item_subtotal(it.quantity, price),
                    )
                )
            line_subtotal = sum((ln.subtotal for ln in lines), to_money(0))
            fee = delivery_fee(line_subtotal, self._pricing)
            totals = order_totals(lines, delivery_fee=fee, tax_percent=self._pricing.tax_percent, discount=disc)
            if totals.total_amount < 0:
                raise ValidationError("Discount cannot exceed the order total")

            # 4. order and its items
            order = Order(
                order_number=order_number,
                user_id=user_id,
                status=INITIAL_STATUS,
                payment_method=method,
                payment_status="PENDING",
                delivery_address=address,
                delivery_date=date_,
                delivery_slot=slot,
                order_notes=order_notes,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                tax=totals.tax,
                discount=totals.discount,
                total_amount=totals.total_amount,
            )
            session.add(order)
            try:
                session.flush()
            except IntegrityError:
                raise ConflictError(f"Order number {order_number} is already taken, please retry")
            for ln in lines:
                ln.order_id = order.id
                session.add(ln)
            session.flush()

            # 5. debit stock
            self._ledger.apply_stock_delta(session, lines, StockDirection.REDUCE)

            # 6. empty the cart, keep the row
            session.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
            cart.total_amount = to_money(0)
            cart.updated_at = datetime.now()
            session.expire(cart, ["items"])

            # 7. initial history entry
            self._history.record(
                session,
                order_id=order.id,
                old_status=None,
                new_status=INITIAL_STATUS,
                changed_by=user_id,
                notes="Order placed",
            )
            session.expire(order, ["items", "status_history"])
            log_event(
                "info",
                "order.created",
                order_number=order_number,
                user_id=user_id,
                items=len(lines),
                total=float(totals.total_amount),
            )
            return to_order_dto(order, self._history.list_for_order(session, order.id))

    @staticmethod
    def _lock_order(session: Session, order_number: str, user_id: Optional[int] = None) -> Optional[Order]:
        q = session.query(Order).filter(Order.order_number == order_number)
        if user_id is not None:
            q = q.filter(Order.user_id == user_id)
        return q.with_for_update().first()

    def _transition(
        self,
        session: Session,
        order: Order,
        target: OrderStatus,
        *,
        changed_by: Optional[int],
        notes: Optional[str],
        cancellation_reason: Optional[str] = None,
    ) -> None:
        current = order.status
        if not can_transition(current, target):
            raise IllegalTransitionError(current, target)
        order.status = target
        order.updated_at = datetime.now()
        if target is OrderStatus.CANCELLED:
            order.cancelled_at = datetime.now()
            order.cancellation_reason = cancellation_reason
        session.flush()
        if releases_stock(current, target):
            self._ledger.apply_stock_delta(session, order.items, StockDirection.RESTORE)
        self._history.record(
            session,
            order_id=order.id,
            old_status=current,
            new_status=target,
            changed_by=changed_by,
            notes=notes,
        )
        log_event(
            "info",
            "order.status_changed",
            order_number=order.order_number,
            old_status=current.value,
            new_status=target.value,
            changed_by=changed_by,
        )

    def cancel_order(self, *, order_number: str, user_id: int, reason: Optional[str] = None) -> Dict:
        """Cancel the caller's own order and release its stock."""
        with self._session_factory() as session:
            order = self._lock_order(session, order_number, user_id)
            if order is None:
                raise NotFoundError("Order not found or access denied")
            if order.status not in CANCELLABLE_STATUSES:
                raise IllegalTransitionError(
                    order.status,
                    OrderStatus.CANCELLED,
                    f"Order cannot be cancelled. Current status: {order.status.value}",
                )
            self._transition(
                session,
                order,
                OrderStatus.CANCELLED,
                changed_by=user_id,
                notes=reason or "Order cancelled by customer",
                cancellation_reason=reason or "Cancelled by customer",
            )
            return to_order_dto(order, self._history.list_for_order(session, order.id))

    def update_order_status(
        self,
        *,
        order_number: str,
        new_status,
        notes: Optional[str] = None,
        acting_admin_id: Optional[int] = None,
    ) -> Dict:
        """Admin status change, checked against the transition table."""
        target = parse_status(new_status)
        with self._session_factory() as session:
            order = self._lock_order(session, order_number)
            if order is None:
                raise NotFoundError("Order not found")
            self._transition(
                session,
                order,
                target,
                changed_by=acting_admin_id,
                notes=notes or f"Status changed to {target.value}",
                cancellation_reason=notes or "Cancelled by admin",
            )
            return to_order_dto(order, self._history.list_for_order(session, order.id))

    def get_order(self, order_number: str, user_id: Optional[int] = None) -> Dict:
        """Complete order with items and history; scoped to ``user_id`` when given."""
        with self._session_factory() as session:
            q = session.query(Order).filter(Order.order_number == order_number)
            if user_id is not None:
                q = q.filter(Order.user_id == user_id)
            order = q.first()
            if order is None:
                raise NotFoundError("Order not found")
            return to_order_dto(order, self._history.list_for_order(session, order.id))

    def list_orders(self, user_id: int, limit: int = 20) -> List[Dict]:
        with self._session_factory() as session:
            rows = (
                session.query(Order)
                .filter(Order.user_id == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .limit(max(1, min(int(limit), 100)))
                .all()
            )
            return [to_order_dto(o) for o in rows]
