"""PantryFresh storefront Flask application."""

from __future__ import annotations

from typing import Optional

import click
from flask import Flask

from pantryfresh.config import AppConfig, load_env
from pantryfresh.db.session import create_session_factory, init_db
from pantryfresh.services.cart_service import CartService
from pantryfresh.services.logging import log_event, set_log_level
from pantryfresh.services.order_service import OrderService
from pantryfresh.services.totals import PricingRules
from routes import register_error_handlers
from routes.admin import admin_bp
from routes.cart import cart_bp
from routes.orders import orders_bp


def create_app(config: Optional[AppConfig] = None, session_factory=None) -> Flask:
    """Build the app. The engine is owned here, not by the services."""
    config = config or load_env()
    set_log_level(config.log_level)
    if session_factory is None:
        session_factory = create_session_factory(config.database_url)
        init_db(session_factory.engine)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["PANTRYFRESH_CONFIG"] = config

    components = {
        "session_factory": session_factory,
        "cart_service": CartService(session_factory, ttl_hours=config.cart_ttl_hours),
        "order_service": OrderService(
            session_factory,
            pricing=PricingRules.from_config(config),
        ),
    }
    app.extensions["pantryfresh_components"] = components

    app.register_blueprint(cart_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(admin_bp)
    register_error_handlers(app)

    @app.cli.command("reap-carts")
    def reap_carts():
        """Delete carts whose expiry has passed."""
        count = components["cart_service"].clean_expired_carts()
        click.echo(f"Removed {count} expired cart(s)")

    return app


def main() -> None:
    app = create_app()
    try:
        app.run(host="0.0.0.0", port=5000, debug=False)
    finally:
        app.extensions["pantryfresh_components"]["session_factory"].engine.dispose()
        log_event("info", "app.stopped")


if __name__ == "__main__":
    main()
