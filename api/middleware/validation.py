# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation error reporting.

Route parameters, query strings and JSON bodies are validated against their
Pydantic models by flask-openapi3; failures are answered here with a
problem document listing every offending field.
"""

from flask import request, jsonify, Response
from typing import Dict, Any, List
from pydantic import ValidationError
from opentelemetry import trace
import logging

from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

JSON_SCALARS = (str, int, float, bool, type(None), list, dict)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of ``{field, message, type, input}`` dictionaries
    """
    errors = []

    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"]) or "body"
        value = error.get("input")
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"],
            "input": value if isinstance(value, JSON_SCALARS) else str(value)
        })

    return errors


class ValidationMiddleware:
    """Turns request validation failures into 400 problem documents."""

    status_code = 400

    def __init__(self, base_url: str):
        self.hal_formatter = HalFormatter(base_url)

    def format_validation_errors(self, validation_error: ValidationError) -> List[Dict[str, Any]]:
        return format_validation_errors(validation_error)

    def validation_error_response(self, validation_error: ValidationError) -> Response:
        """
        Build the response for a request that failed model validation.

        Registered as the app's ``validation_error_callback``.
        """
        with tracer.start_as_current_span("validation.request_rejected") as span:
            validation_errors = format_validation_errors(validation_error)
            span.set_attributes({
                "validation.model": validation_error.title,
                "validation.error_count": len(validation_errors),
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                "Request validation failed",
                extra={
                    "model": validation_error.title,
                    "path": request.path,
                    "method": request.method,
                    "errors": validation_errors
                }
            )

            detail = f"Request validation failed for {validation_error.title}"
            if request.method in ("POST", "PUT") and not request.is_json:
                detail = "Request must have Content-Type: application/json"

            response = jsonify(self.hal_formatter.format_validation_error(
                detail,
                request.path,
                validation_errors
            ))
            response.status_code = self.status_code
            return response
