from decimal import Decimal

import pytest

from pantryfresh import config as config_module
from pantryfresh.config import load_env, validate_amount, validate_currency
from pantryfresh.services.totals import PricingRules


ENV_KEYS = (
    "DATABASE_URL",
    "SECRET_KEY",
    "LOG_LEVEL",
    "CURRENCY",
    "TAX_PERCENT",
    "FREE_DELIVERY_THRESHOLD",
    "FLAT_DELIVERY_FEE",
    "CART_TTL_HOURS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "_load_settings_file", lambda: {})


def test_defaults():
    cfg = load_env()

    assert cfg.database_url == "sqlite:///data/app.db"
    assert cfg.currency == "INR"
    assert cfg.tax_percent == Decimal("18")
    assert cfg.free_delivery_threshold == Decimal("500")
    assert cfg.flat_delivery_fee == Decimal("40")
    assert cfg.cart_ttl_hours == 24


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CURRENCY", "usd")
    monkeypatch.setenv("TAX_PERCENT", "5")
    monkeypatch.setenv("FLAT_DELIVERY_FEE", "0")
    monkeypatch.setenv("CART_TTL_HOURS", "48")

    cfg = load_env()

    assert cfg.currency == "USD"
    assert cfg.tax_percent == Decimal("5")
    assert cfg.flat_delivery_fee == Decimal("0")
    assert cfg.cart_ttl_hours == 48

    rules = PricingRules.from_config(cfg)
    assert rules.tax_percent == Decimal("5")


def test_settings_file_wins_over_env(monkeypatch):
    monkeypatch.setenv("TAX_PERCENT", "5")
    monkeypatch.setattr(config_module, "_load_settings_file", lambda: {"TAX_PERCENT": "12"})

    assert load_env().tax_percent == Decimal("12")


def test_bad_currency(monkeypatch):
    monkeypatch.setenv("CURRENCY", "RUPEE")
    with pytest.raises(ValueError):
        load_env()


def test_bad_ttl(monkeypatch):
    monkeypatch.setenv("CART_TTL_HOURS", "0")
    with pytest.raises(ValueError, match="CART_TTL_HOURS"):
        load_env()


def test_validate_amount():
    assert validate_amount(None, "FEE", "40") == Decimal("40")
    assert validate_amount(" 7.5 ", "FEE", "40") == Decimal("7.5")
    with pytest.raises(ValueError, match="FEE must be a number"):
        validate_amount("cheap", "FEE", "40")
    with pytest.raises(ValueError, match="FEE must be >= 0"):
        validate_amount("-1", "FEE", "40")


def test_validate_currency():
    assert validate_currency(None) == "INR"
    assert validate_currency(" eur ") == "EUR"
