import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional
from ..errors import ValidationError
from ..services.order_status import OrderStatus

MAX_ITEM_QUANTITY = 99
MAX_DELIVERY_DAYS_AHEAD = 30
# largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
PAYMENT_METHODS = ("COD", "ONLINE", "WALLET")
DELIVERY_SLOTS = ("MORNING", "AFTERNOON", "EVENING", "ANYTIME")
ADDRESS_REQUIRED_FIELDS = ("full_name", "phone", "address_line1", "city", "state", "pincode")

_PINCODE_RE = re.compile(r"^\d{6}$")
_PHONE_RE = re.compile(r"^\d{10}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_int(value) -> int:
    """Whole numbers only: ``2``, ``"2"``, ``2.0``. Raises ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("not a whole number")
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueError("not a whole number")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError("not a number")


def ensure_positive_int(value, field: str) -> int:
    try:
        parsed = _parse_int(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field}")
    return parsed


def validate_quantity(value) -> int:
    try:
        qty = _parse_int(value)
    except ValueError:
        raise ValidationError("Quantity must be a positive number")
    if qty <= 0:
        raise ValidationError("Quantity must be a positive number")
    if qty > MAX_ITEM_QUANTITY:
        raise ValidationError(f"Maximum quantity per item is {MAX_ITEM_QUANTITY}")
    return qty


def validate_delivery_address(address) -> dict:
    """Check required fields and formats; return a normalized copy for snapshotting."""
    if not address or not isinstance(address, dict):
        raise ValidationError("Delivery address is required")
    missing = [f for f in ADDRESS_REQUIRED_FIELDS if not str(address.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    pincode = str(address["pincode"]).strip()
    if not _PINCODE_RE.match(pincode):
        raise ValidationError("Pincode must be 6 digits")
    phone = re.sub(r"\D", "", str(address["phone"]))
    if not _PHONE_RE.match(phone):
        raise ValidationError("Phone number must be 10 digits")
    snapshot = {k: (v.strip() if isinstance(v, str) else v) for k, v in address.items()}
    snapshot["pincode"] = pincode
    return snapshot


def validate_payment_method(value: Optional[str]) -> str:
    if value is None:
        return "COD"
    if not isinstance(value, str):
        raise ValidationError("Invalid payment method. Must be COD, ONLINE, or WALLET")
    method = value.strip().upper() or "COD"
    if method not in PAYMENT_METHODS:
        raise ValidationError("Invalid payment method. Must be COD, ONLINE, or WALLET")
    return method


def validate_delivery_details(
    delivery_date=None,
    delivery_slot: Optional[str] = None,
    *,
    today: Optional[date] = None,
):
    """Return ``(date | None, slot | None)`` after range and enum checks."""
    parsed_date = None
    if delivery_date:
        if isinstance(delivery_date, datetime):
            parsed_date = delivery_date.date()
        elif isinstance(delivery_date, date):
            parsed_date = delivery_date
        elif isinstance(delivery_date, str) and _DATE_RE.match(delivery_date.strip()):
            try:
                parsed_date = date.fromisoformat(delivery_date.strip())
            except ValueError:
                raise ValidationError("Invalid delivery date")
        else:
            raise ValidationError("Invalid delivery date")
        today = today or date.today()
        if parsed_date < today + timedelta(days=1):
            raise ValidationError("Delivery date must be at least tomorrow")
        if parsed_date > today + timedelta(days=MAX_DELIVERY_DAYS_AHEAD):
            raise ValidationError(f"Delivery date cannot be more than {MAX_DELIVERY_DAYS_AHEAD} days in advance")
    slot = None
    if delivery_slot:
        if not isinstance(delivery_slot, str):
            raise ValidationError("Invalid delivery slot. Must be MORNING, AFTERNOON, EVENING, or ANYTIME")
        slot = delivery_slot.strip().upper()
        if slot not in DELIVERY_SLOTS:
            raise ValidationError("Invalid delivery slot. Must be MORNING, AFTERNOON, EVENING, or ANYTIME")
    return parsed_date, slot


def validate_discount(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise ValidationError("Discount must be a number")
    try:
        discount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError("Discount must be a number")
    if not discount.is_finite():
        raise ValidationError("Discount must be a number")
    if discount < 0:
        raise ValidationError("Discount cannot be negative")
    if discount > MAX_AMOUNT:
        raise ValidationError(f"Discount cannot exceed {MAX_AMOUNT}")
    return discount


def parse_status(value) -> OrderStatus:
    if not value:
        raise ValidationError("Status is required")
    if not isinstance(value, str):
        raise ValidationError("Invalid status value")
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        raise ValidationError("Invalid status value")
