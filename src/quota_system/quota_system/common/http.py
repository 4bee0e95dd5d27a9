from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def json_body() -> dict[str, Any]:
    """Return the request JSON object or raise ValidationError."""

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def bulk_status(success_count: int, error_count: int) -> int:
    if error_count == 0:
        return 200
    return 207 if success_count > 0 else 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"message": exc.description, "code": exc.name.upper().replace(" ", "_")}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error", "code": "INTERNAL_ERROR"}), 500
