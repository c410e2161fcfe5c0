"""HTTP boundary for the storefront core (Flask blueprints)."""

from __future__ import annotations

from flask import Flask, jsonify, request

from pantryfresh.errors import (
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ShopError,
    StockError,
    ValidationError,
)
from pantryfresh.services.logging import log_event


ERROR_STATUS = (
    (ValidationError, 400),
    (StockError, 400),
    (NotFoundError, 404),
    (IllegalTransitionError, 400),
    (ConflictError, 409),
)


def status_for(exc: ShopError) -> int:
    for cls, code in ERROR_STATUS:
        if isinstance(exc, cls):
            return code
    return 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ShopError)
    def handle_shop_error(exc: ShopError):
        code = status_for(exc)
        log_event("info", "http.domain_error", path=request.path, status=code, error=exc.kind, message=exc.message)
        return jsonify(exc.to_dict()), code
