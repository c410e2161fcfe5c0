"""Shared helpers for blueprints: components and caller identity."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import abort, current_app, jsonify, make_response, request


def components() -> Dict[str, Any]:
    return current_app.extensions["pantryfresh_components"]


def _header_id(name: str) -> Optional[int]:
    raw = (request.headers.get(name) or "").strip()
    if not raw.isdigit() or int(raw) <= 0:
        return None
    return int(raw)


def current_user_id() -> int:
    # set by the upstream authentication layer
    user_id = _header_id("X-User-Id")
    if user_id is None:
        abort(make_response(jsonify({"success": False, "error": "Unauthorized", "message": "Authentication required"}), 401))
    return user_id


def current_admin_id() -> int:
    admin_id = _header_id("X-Admin-Id")
    if admin_id is None:
        abort(make_response(jsonify({"success": False, "error": "Forbidden", "message": "Admin access required"}), 403))
    return admin_id


def json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
