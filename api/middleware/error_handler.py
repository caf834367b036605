# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured HAL responses.

Form handlers answer their own domain failures; the handlers here cover
what escapes them: unknown routes, wrong methods, and unexpected exceptions.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, List, Optional, Tuple
from opentelemetry import trace
import logging

from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

HTTP_PROBLEM_TYPES = {
    400: ("bad-request", "Bad Request"),
    401: ("authentication-required", "Authentication Required"),
    403: ("not-authorized", "Not Authorized"),
    404: ("resource-not-found", "Resource Not Found"),
    405: ("method-not-allowed", "Method Not Allowed"),
}


class ErrorHandlerMiddleware:
    """Problem documents for framework errors and uncaught exceptions."""

    def __init__(self, app: Flask, base_url: str):
        self.app = app
        self.hal_formatter = HalFormatter(base_url)
        app.register_error_handler(HTTPException, self.handle_http_error)
        app.register_error_handler(Exception, self.handle_unexpected_error)

    def handle_http_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        if error.code is None or error.code >= 500:
            return self.handle_unexpected_error(error)

        error_type, title = HTTP_PROBLEM_TYPES.get(error.code, ("http-error", error.name))
        detail = str(error.description) if error.description else title

        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Client error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "path": request.path,
                    "method": request.method
                }
            )

        return self.hal_formatter.builder.build_error_response(
            error_type, title, error.code, detail, request.path
        ), error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """Answer 500, with the exception text outside production."""
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

        detail = "An unexpected error occurred"
        if self.app.config.get('ENVIRONMENT') != 'production':
            detail = f"{error.__class__.__name__}: {str(error)}"

        return self.hal_formatter.format_server_error(detail, request.path), 500


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for schema constraint violations on write."""

    def __init__(self, message: str, validation_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CustomException):
    """Exception for authentication errors."""

    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class AuthorizationException(CustomException):
    """Exception for callers whose owner record does not reference the target form."""

    def __init__(self, message: str):
        super().__init__(message, 403, "not-authorized")


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class StoreException(CustomException):
    """Exception for document store calls that failed or returned no result."""

    def __init__(self, message: str):
        super().__init__(message, 500, "store-error")


def format_exception_response(
    hal_formatter: HalFormatter,
    error: CustomException,
    instance: str
) -> Dict[str, Any]:
    """Build the problem document matching a custom exception."""
    if isinstance(error, ValidationException):
        return hal_formatter.format_validation_error(error.message, instance, error.validation_errors)
    if isinstance(error, AuthenticationException):
        return hal_formatter.format_authentication_error(error.message, instance)
    if isinstance(error, AuthorizationException):
        return hal_formatter.format_authorization_error(error.message, instance)
    if isinstance(error, NotFoundException):
        return hal_formatter.format_not_found_error(error.message, instance)
    return hal_formatter.format_server_error(error.message, instance)


def register_custom_error_handlers(app: Flask, hal_formatter: HalFormatter):
    """
    Register handlers for custom exceptions.

    Args:
        app: Flask application
        hal_formatter: HAL formatter instance
    """

    @app.errorhandler(CustomException)
    def handle_custom_exception(error: CustomException):
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "error_message": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            error_response = format_exception_response(hal_formatter, error, request.path)
            return jsonify(error_response), error.status_code
