"""Customer order endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ._context import components, current_user_id, json_body


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _order_service():
    return components()["order_service"]


@orders_bp.post("")
def create_order():
    payload = json_body()
    order = _order_service().create_order(
        user_id=current_user_id(),
        delivery_address=payload.get("delivery_address"),
        payment_method=payload.get("payment_method") or "COD",
        delivery_date=payload.get("delivery_date"),
        delivery_slot=payload.get("delivery_slot"),
        order_notes=payload.get("order_notes"),
        discount=payload.get("discount", 0),
    )
    return jsonify(
        {
            "success": True,
            "message": f"Order {order['order_number']} created successfully",
            "data": {
                "order": order,
                "order_number": order["order_number"],
                "total_amount": order["total_amount"],
                "items_count": len(order["items"]),
                "estimated_delivery": order["delivery_date"] or "To be confirmed",
            },
        }
    ), 201


@orders_bp.get("")
def list_orders():
    limit = request.args.get("limit", default=20, type=int)
    orders = _order_service().list_orders(current_user_id(), limit=limit)
    return jsonify({"success": True, "data": {"orders": orders, "count": len(orders)}})


@orders_bp.get("/<order_number>")
def get_order(order_number: str):
    order = _order_service().get_order(order_number, user_id=current_user_id())
    return jsonify({"success": True, "data": {"order": order}})


@orders_bp.post("/<order_number>/cancel")
def cancel_order(order_number: str):
    payload = json_body()
    reason = str(payload.get("reason") or "").strip() or None
    order = _order_service().cancel_order(order_number=order_number, user_id=current_user_id(), reason=reason)
    return jsonify({"success": True, "message": f"Order {order_number} cancelled", "data": {"order": order}})
