"""Domain errors raised by the cart and order services.

The HTTP layer maps each kind to a response; nothing in the services returns
raw store exceptions.
"""

from typing import List, Optional


class ShopError(Exception):
    """Base exception for all storefront domain errors."""

    kind = "Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(ShopError):
    """Malformed or missing input; the caller can fix the request."""

    kind = "Validation Error"


class CartEmptyError(ValidationError):
    """Checkout was attempted without any cart items."""

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class StockError(ShopError):
    """Requested quantity is not available."""

    kind = "Stock Error"

    def __init__(self, message: str, available_stock: Optional[int] = None):
        self.available_stock = available_stock
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.available_stock is not None:
            data["available_stock"] = self.available_stock
        return data


class StockValidationError(StockError):
    """One or more cart lines failed the stock check at checkout."""

    kind = "Cart Validation Error"

    def __init__(self, errors: List[str], message: str = "Cart validation failed"):
        self.errors = list(errors)
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["details"] = self.errors
        return data


class NotFoundError(ShopError):
    """Order, cart item or product is absent or not owned by the caller."""

    kind = "Not Found"


class IllegalTransitionError(ShopError):
    """The order cannot move from its current status to the requested one."""

    kind = "Invalid Status Transition"

    def __init__(self, current_status, target_status, message: Optional[str] = None):
        self.current_status = current_status
        self.target_status = target_status
        current = getattr(current_status, "value", current_status)
        target = getattr(target_status, "value", target_status)
        super().__init__(message or f"Cannot transition from {current} to {target}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["current_status"] = getattr(self.current_status, "value", self.current_status)
        return data


class ConflictError(ShopError):
    """A unique key collided; the caller must change the conflicting field or retry."""

    kind = "Conflict"
