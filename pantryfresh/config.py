import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
import json
from typing import Optional


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    currency: str
    tax_percent: Decimal
    free_delivery_threshold: Decimal
    flat_delivery_fee: Decimal
    cart_ttl_hours: int


def validate_currency(value: Optional[str]) -> str:
    v = (value or "INR").strip().upper()
    if len(v) != 3:
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


def validate_amount(value, field: str, default: str) -> Decimal:
    raw = default if value is None or str(value).strip() == "" else str(value).strip()
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{field} must be a number, got {raw!r}")
    if amount < 0:
        raise ValueError(f"{field} must be >= 0")
    return amount


def _load_settings_file() -> dict:
    try:
        path = Path(__file__).resolve().parents[1] / "data" / "settings.json"
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        pass
    return {}


def load_env() -> AppConfig:
    # data/settings.json first, environment as fallback
    s = _load_settings_file()

    def pick(key: str):
        return s.get(key) or os.getenv(key)

    ttl = int(pick("CART_TTL_HOURS") or 24)
    if ttl <= 0:
        raise ValueError("CART_TTL_HOURS must be > 0")
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/app.db"),
        secret_key=os.getenv("SECRET_KEY", "dev_secret"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        currency=validate_currency(pick("CURRENCY")),
        tax_percent=validate_amount(pick("TAX_PERCENT"), "TAX_PERCENT", "18"),
        free_delivery_threshold=validate_amount(pick("FREE_DELIVERY_THRESHOLD"), "FREE_DELIVERY_THRESHOLD", "500"),
        flat_delivery_fee=validate_amount(pick("FLAT_DELIVERY_FEE"), "FLAT_DELIVERY_FEE", "40"),
        cart_ttl_hours=ttl,
    )
