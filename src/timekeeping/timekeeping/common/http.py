from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError
from .serialization import to_payload

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def respond(payload, status: int = 200):
    return jsonify(to_payload(payload)), status


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": code, "message": message}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify(error_body(e.code, str(e))), e.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "HTTP error").upper().replace(" ", "_")
        return jsonify(error_body(code, e.description or e.name)), e.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = f"internal error: {e}" if app.config.get("DEBUG") else "internal error"
        return jsonify(error_body("INTERNAL_ERROR", message)), 500
