"""Admin back-office order endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ._context import components, current_admin_id, json_body


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.before_request
def guard_admin_routes():
    current_admin_id()
    return None


@admin_bp.get("/orders/<order_number>")
def get_order(order_number: str):
    order = components()["order_service"].get_order(order_number)
    return jsonify({"success": True, "data": {"order": order}})


@admin_bp.patch("/orders/<order_number>/status")
def update_order_status(order_number: str):
    payload = json_body()
    notes = str(payload.get("notes") or "").strip() or None
    order = components()["order_service"].update_order_status(
        order_number=order_number,
        new_status=payload.get("status"),
        notes=notes,
        acting_admin_id=current_admin_id(),
    )
    return jsonify(
        {
            "success": True,
            "message": f"Order {order_number} status updated to {order['status']}",
            "data": {"order": order},
        }
    )
