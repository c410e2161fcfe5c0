"""Cart endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ._context import components, current_user_id, json_body


cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


def _cart_service():
    return components()["cart_service"]


@cart_bp.get("")
def get_cart():
    cart = _cart_service().get_cart(user_id=current_user_id())
    message = "Cart retrieved with stock issues" if cart["has_stock_issues"] else "Cart retrieved successfully"
    return jsonify({"success": True, "message": message, "data": cart})


@cart_bp.post("/items")
def add_to_cart():
    payload = json_body()
    cart = _cart_service().add_item(
        user_id=current_user_id(),
        product_id=payload.get("product_id"),
        quantity=payload.get("quantity", 1),
    )
    return jsonify({"success": True, "message": "Item added to cart", "data": cart}), 201


@cart_bp.put("/items/<item_id>")
def update_cart_item(item_id: str):
    payload = json_body()
    cart = _cart_service().update_item(
        user_id=current_user_id(),
        item_id=item_id,
        quantity=payload.get("quantity"),
    )
    return jsonify({"success": True, "message": "Cart item updated", "data": cart})


@cart_bp.delete("/items/<item_id>")
def remove_cart_item(item_id: str):
    cart = _cart_service().remove_item(user_id=current_user_id(), item_id=item_id)
    return jsonify({"success": True, "message": "Item removed from cart", "data": cart})


@cart_bp.delete("")
def clear_cart():
    cart = _cart_service().clear_cart(user_id=current_user_id())
    return jsonify({"success": True, "message": "Cart cleared", "data": cart})
