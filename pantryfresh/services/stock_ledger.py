from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional
from sqlalchemy.orm import Session
from ..models.product import Product
from .logging import log_event


class StockDirection(str, Enum):
    REDUCE = "REDUCE"
    RESTORE = "RESTORE"


@dataclass(frozen=True)
class StockCheck:
    valid: bool
    available_stock: Optional[int] = None
    message: Optional[str] = None


class StockLedger:
    """Reads and writes ``Product.stock`` inside the caller's transaction.

    Every method takes the open session; the ledger never commits. Writes go
    through row locks so concurrent checkouts and cancellations serialize on
    the product row.
    """

    @staticmethod
    def lock_products(session: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Lock product rows in ascending id order and return them by id."""
        ids = sorted({int(pid) for pid in product_ids})
        if not ids:
            return {}
        rows = (
            session.query(Product)
            .filter(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .all()
        )
        return {p.id: p for p in rows}

    @staticmethod
    def check_product(product: Optional[Product], requested_qty: int) -> StockCheck:
        if product is None:
            return StockCheck(valid=False, message="Product not found")
        if not product.is_available:
            return StockCheck(valid=False, available_stock=product.stock, message=f"{product.name} is currently unavailable")
        if product.stock < requested_qty:
            return StockCheck(
                valid=False,
                available_stock=product.stock,
                message=f"Only {product.stock} units of {product.name} available",
            )
        return StockCheck(valid=True, available_stock=product.stock)

    def validate_stock(self, session: Session, product_id: int, requested_qty: int, *, lock: bool = False) -> StockCheck:
        q = session.query(Product).filter(Product.id == product_id)
        if lock:
            q = q.with_for_update()
        return self.check_product(q.first(), requested_qty)

    def apply_stock_delta(self, session: Session, items: Iterable, direction: StockDirection) -> Dict[int, int]:
        """Apply ``(product_id, quantity)`` deltas from ``items``; return new stock by product id.

        REDUCE floors at zero instead of failing. Products that no longer
        exist are skipped.
        """
        direction = StockDirection(direction)
        lines = [(int(it.product_id), int(it.quantity)) for it in items]
        products = self.lock_products(session, [pid for pid, _ in lines])
        new_levels: Dict[int, int] = {}
        for product_id, quantity in lines:
            product = products.get(product_id)
            if product is None:
                log_event("warning", "stock.product_missing", product_id=product_id, direction=direction.value)
                continue
            if direction is StockDirection.REDUCE:
                new_stock = max(0, product.stock - quantity)
            else:
                new_stock = product.stock + quantity
            product.stock = new_stock
            product.is_available = new_stock > 0
            new_levels[product_id] = new_stock
        session.flush()
        log_event("info", "stock.applied", direction=direction.value, products=new_levels)
        return new_levels
