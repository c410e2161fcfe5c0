from typing import Any, Dict, Iterable, List, Optional
from ..services.order_status import status_info


def _money(value) -> float:
    return float(value or 0)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def to_cart_item_dto(row: Any, issue: Optional[str] = None) -> Dict:
    product = getattr(row, "product", None)
    return {
        "id": row.id,
        "product_id": row.product_id,
        "product_name": getattr(product, "name", None),
        "unit": getattr(product, "unit", None),
        "quantity": row.quantity,
        "price": _money(row.price),
        "subtotal": _money(row.subtotal),
        "stock_available": getattr(product, "stock", 0) if product is not None else 0,
        "has_stock_issue": issue is not None,
    }


def to_cart_dto(cart: Any, issues: Optional[Dict[int, str]] = None, warnings: Optional[List[Dict]] = None) -> Dict:
    """Cart snapshot; ``cart`` may be None for a user who never added anything."""
    issues = issues or {}
    warnings = warnings or []
    if cart is None:
        return {
            "id": None,
            "items": [],
            "items_count": 0,
            "total_amount": 0.0,
            "expires_at": None,
            "is_empty": True,
            "has_stock_issues": False,
            "stock_issues": [],
        }
    items = [to_cart_item_dto(it, issues.get(it.id)) for it in cart.items]
    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "items": items,
        "items_count": len(items),
        "total_amount": _money(cart.total_amount),
        "expires_at": _iso(cart.expires_at),
        "is_empty": not items,
        "has_stock_issues": bool(warnings),
        "stock_issues": warnings,
    }


def to_order_item_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "product_id": row.product_id,
        "product_name": row.product_name,
        "quantity": row.quantity,
        "price": _money(row.price),
        "subtotal": _money(row.subtotal),
    }


def to_history_dto(row: Any) -> Dict:
    return {
        "old_status": row.old_status.value if row.old_status else None,
        "new_status": row.new_status.value,
        "notes": row.notes,
        "changed_by": row.changed_by,
        "changed_at": _iso(row.changed_at),
    }


def to_order_dto(order: Any, history: Optional[Iterable] = None) -> Dict:
    data = {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "status": order.status.value,
        "status_info": status_info(order.status),
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "delivery_address": dict(order.delivery_address or {}),
        "delivery_date": _iso(order.delivery_date),
        "delivery_slot": order.delivery_slot,
        "order_notes": order.order_notes,
        "subtotal": _money(order.subtotal),
        "delivery_fee": _money(order.delivery_fee),
        "tax": _money(order.tax),
        "discount": _money(order.discount),
        "total_amount": _money(order.total_amount),
        "cancelled_at": _iso(order.cancelled_at),
        "cancellation_reason": order.cancellation_reason,
        "created_at": _iso(order.created_at),
        "items": [to_order_item_dto(it) for it in order.items],
    }
    if history is not None:
        data["status_history"] = [to_history_dto(h) for h in history]
    return data
