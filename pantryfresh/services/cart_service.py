from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..errors import ConflictError, NotFoundError, StockError
from ..models.cart import Cart
from ..models.cart_item import CartItem
from ..models.product import Product
from ..utils.dto import to_cart_dto
from ..utils.validators import ensure_positive_int, validate_quantity
from .logging import log_event
from .stock_ledger import StockLedger
from .totals import cart_total, item_subtotal, to_money

DEFAULT_CART_TTL_HOURS = 24


class CartService:
    """Cart operations backed by DB.

    Every mutation re-captures the product's effective price on the touched
    line, recomputes the cart total from the lines and pushes the expiry
    forward. Each call is one transaction and returns the refreshed cart
    snapshot.
    """

    def __init__(self, session_factory, stock_ledger: Optional[StockLedger] = None, ttl_hours: int = DEFAULT_CART_TTL_HOURS):
        self._session_factory = session_factory
        self._ledger = stock_ledger or StockLedger()
        self._ttl = timedelta(hours=ttl_hours)

    def _expiry(self) -> datetime:
        return datetime.now() + self._ttl

    @staticmethod
    def _find_cart(session: Session, user_id: int) -> Optional[Cart]:
        return session.query(Cart).filter(Cart.user_id == user_id).first()

    def _get_or_create_cart(self, session: Session, user_id: int) -> Cart:
        cart = self._find_cart(session, user_id)
        if cart:
            return cart
        cart = Cart(user_id=user_id, total_amount=Decimal("0.00"), expires_at=self._expiry())
        session.add(cart)
        try:
            session.flush()
        except IntegrityError:
            raise ConflictError("Cart was created concurrently, please retry")
        log_event("info", "cart.created", user_id=user_id, cart_id=cart.id)
        return cart

    def _owned_item(self, session: Session, user_id: int, item_id) -> Tuple[Cart, CartItem]:
        item_id = ensure_positive_int(item_id, "cart item ID")
        item = session.query(CartItem).filter(CartItem.id == item_id).first()
        if not item or item.cart.user_id != user_id:
            raise NotFoundError("Cart item not found")
        return item.cart, item

    @staticmethod
    def _capture_price(item: CartItem, product: Product) -> None:
        item.price = to_money(product.effective_price)
        item.subtotal = item_subtotal(item.quantity, item.price)

    def _touch(self, session: Session, cart: Cart) -> None:
        session.flush()
        session.expire(cart, ["items"])
        cart.total_amount = cart_total(cart.items)
        cart.expires_at = self._expiry()
        session.flush()

    def _check_stock(self, session: Session, product_id: int, quantity: int) -> Product:
        check = self._ledger.validate_stock(session, product_id, quantity)
        if not check.valid:
            if check.message == "Product not found":
                raise NotFoundError(check.message)
            raise StockError(check.message, available_stock=check.available_stock)
        return session.get(Product, product_id)

    def get_cart(self, *, user_id: int) -> Dict:
        """Return the cart after a reconciliation pass against live product state.

        Lines that are unavailable or short on stock stay in the cart and are
        reported in ``stock_issues``. Captured prices that drifted from the
        product's effective price are refreshed and the total recomputed.
        """
        with self._session_factory() as session:
            cart = self._find_cart(session, user_id)
            if cart is None:
                return to_cart_dto(None)
            issues: Dict[int, str] = {}
            warnings: List[Dict] = []
            repriced = False
            for item in cart.items:
                product = item.product
                if product is None:
                    issue = "Product no longer exists"
                elif not product.is_available:
                    issue = "Product is no longer available"
                elif product.stock < item.quantity:
                    issue = f"Only {product.stock} units available (you have {item.quantity} in cart)"
                else:
                    issue = None
                if issue:
                    issues[item.id] = issue
                    warnings.append({
                        "item_id": item.id,
                        "product_id": item.product_id,
                        "product_name": getattr(product, "name", None),
                        "issue": issue,
                    })
                if product is not None and to_money(product.effective_price) != to_money(item.price):
                    old_price = to_money(item.price)
                    self._capture_price(item, product)
                    repriced = True
                    warnings.append({
                        "item_id": item.id,
                        "product_id": item.product_id,
                        "product_name": product.name,
                        "issue": "price_changed",
                        "old_price": float(old_price),
                        "new_price": float(item.price),
                    })
            total = cart_total(cart.items)
            if repriced or abs(total - to_money(cart.total_amount)) > Decimal("0.01"):
                cart.total_amount = total
                session.flush()
                log_event("info", "cart.reconciled", cart_id=cart.id, total=float(total))
            if warnings:
                log_event("info", "cart.stock_issues", cart_id=cart.id, issues=len(warnings))
            return to_cart_dto(cart, issues, warnings)

    def add_item(self, *, user_id: int, product_id, quantity=1) -> Dict:
        product_id = ensure_positive_int(product_id, "product ID")
        qnty = validate_quantity(quantity)
        with self._session_factory() as session:
            prod = self._check_stock(session, product_id, qnty)
            cart = self._get_or_create_cart(session, user_id)
            existing = next((it for it in cart.items if it.product_id == product_id), None)
            if existing:
                new_q = validate_quantity(existing.quantity + qnty)
                # the combined quantity must fit the stock, not just the increment
                self._check_stock(session, product_id, new_q)
                existing.quantity = new_q
                self._capture_price(existing, prod)
                item_id = existing.id
            else:
                item = CartItem(cart_id=cart.id, product_id=product_id, quantity=qnty)
                self._capture_price(item, prod)
                session.add(item)
                try:
                    session.flush()
                except IntegrityError:
                    raise ConflictError("Cart item was added concurrently, please retry")
                item_id = item.id
            self._touch(session, cart)
            log_event("info", "cart.item_added", cart_id=cart.id, item_id=item_id, product_id=product_id, quantity=qnty)
            return to_cart_dto(cart)

    def update_item(self, *, user_id: int, item_id, quantity) -> Dict:
        qnty = validate_quantity(quantity)
        with self._session_factory() as session:
            cart, it = self._owned_item(session, user_id, item_id)
            prod = self._check_stock(session, it.product_id, qnty)
            it.quantity = qnty
            self._capture_price(it, prod)
            self._touch(session, cart)
            log_event("info", "cart.item_updated", cart_id=cart.id, item_id=it.id, quantity=qnty)
            return to_cart_dto(cart)

    def remove_item(self, *, user_id: int, item_id) -> Dict:
        with self._session_factory() as session:
            cart, it = self._owned_item(session, user_id, item_id)
            session.delete(it)
            self._touch(session, cart)
            log_event("info", "cart.item_removed", cart_id=cart.id, item_id=it.id)
            return to_cart_dto(cart)

    def clear_cart(self, *, user_id: int) -> Dict:
        """Empty the cart but keep the row. Clearing an empty or missing cart is a no-op."""
        with self._session_factory() as session:
            cart = self._find_cart(session, user_id)
            if cart is None:
                return to_cart_dto(None)
            removed = session.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
            self._touch(session, cart)
            log_event("info", "cart.cleared", cart_id=cart.id, removed=removed)
            return to_cart_dto(cart)

    def clean_expired_carts(self, now: Optional[datetime] = None) -> int:
        """Delete carts (and their items) whose expiry has passed. Run out-of-band."""
        now = now or datetime.now()
        with self._session_factory() as session:
            expired = session.query(Cart).filter(Cart.expires_at < now).all()
            for cart in expired:
                session.delete(cart)
            session.flush()
            log_event("info", "cart.reaped", count=len(expired))
            return len(expired)
