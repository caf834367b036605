# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and user context extraction.

This module provides Flask decorators that validate bearer tokens, build the
caller's user context and restrict endpoints to agency, business or worker
accounts.
"""

from functools import wraps
from flask import request, jsonify, g
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from models.entities import UserContext
from models.enums import OwnerKind
from services.auth import AuthService, TokenValidationError
from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and user context building for
    protected endpoints.
    """

    def __init__(self, auth_service: AuthService, hal_formatter: HalFormatter):
        self.auth_service = auth_service
        self.hal_formatter = hal_formatter

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from request headers.

        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '')

        if not auth_header:
            return None

        if auth_header.startswith('Bearer '):
            return auth_header[7:] or None

        return auth_header

    def build_user_context(self, token_payload: Dict[str, Any], request_info: Dict[str, Any]) -> UserContext:
        """
        Build user context from validated token payload and request information.
        """
        return UserContext(
            user_id=str(token_payload["sub"]),
            owner_kind=OwnerKind(token_payload["role"]),
            email=token_payload.get("email"),
            name=token_payload.get("name"),
            token_payload=token_payload,
            ip_address=request_info.get("ip_address"),
            user_agent=request_info.get("user_agent")
        )

    def get_request_info(self) -> Dict[str, Any]:
        """Extract request metadata for user context."""
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', ''),
            "request_id": request.headers.get('X-Request-ID')
        }

    def authentication_failed(self, detail: str):
        error_response = self.hal_formatter.format_authentication_error(detail, request.path)
        return jsonify(error_response), 401

    def authorization_failed(self, detail: str):
        error_response = self.hal_formatter.format_authorization_error(detail, request.path)
        return jsonify(error_response), 403


def require_auth(auth_middleware: AuthMiddleware) -> Callable:
    """
    Decorator to require JWT authentication for Flask routes.

    The built ``UserContext`` is passed to the route as its first argument
    and stored on ``flask.g``.
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            with tracer.start_as_current_span("auth.middleware.validate_request") as span:
                span.set_attribute("auth.operation", "validate_request")

                token = auth_middleware.extract_token_from_request()
                if not token:
                    span.set_attribute("auth.result", "missing_token")
                    logger.warning("Authentication failed: missing token")
                    return auth_middleware.authentication_failed("Missing authorization token")

                try:
                    token_payload = auth_middleware.auth_service.validate_token(token)
                except TokenValidationError as e:
                    span.set_attribute("auth.result", "invalid_token")
                    logger.warning(f"Authentication failed: {str(e)}")
                    return auth_middleware.authentication_failed(str(e))

                user_context = auth_middleware.build_user_context(
                    token_payload,
                    auth_middleware.get_request_info()
                )
                g.user_context = user_context

                span.set_attributes({
                    "auth.result": "success",
                    "owner.id": user_context.user_id,
                    "owner.kind": user_context.owner_kind.value
                })

                logger.debug(
                    "Authentication successful",
                    extra={
                        "owner_id": user_context.user_id,
                        "owner_kind": user_context.owner_kind.value,
                        "ip_address": user_context.ip_address
                    }
                )

            return f(user_context, *args, **kwargs)

        return decorated_function
    return decorator


def require_roles(auth_middleware: AuthMiddleware, *kinds: OwnerKind) -> Callable:
    """
    Decorator to restrict a route to the given account kinds.

    Answers 401 when the token is missing or invalid and 403 when the
    caller's role is not one of ``kinds``.
    """
    allowed = tuple(OwnerKind(kind) for kind in kinds)

    def decorator(f: Callable) -> Callable:
        @wraps(f)
        @require_auth(auth_middleware)
        def decorated_function(user_context: UserContext, *args, **kwargs):
            with tracer.start_as_current_span("auth.middleware.check_role") as span:
                span.set_attributes({
                    "auth.operation": "check_role",
                    "auth.allowed_roles": [kind.value for kind in allowed],
                    "owner.id": user_context.user_id,
                    "owner.kind": user_context.owner_kind.value
                })

                if not user_context.is_any(*allowed):
                    span.set_attribute("auth.role_result", "denied")
                    logger.warning(
                        f"Authorization failed: role '{user_context.owner_kind.value}' not allowed",
                        extra={
                            "owner_id": user_context.user_id,
                            "owner_kind": user_context.owner_kind.value,
                            "allowed_roles": [kind.value for kind in allowed]
                        }
                    )
                    return auth_middleware.authorization_failed(
                        f"Endpoint requires one of: {', '.join(kind.value for kind in allowed)}"
                    )

                span.set_attribute("auth.role_result", "granted")

            return f(user_context, *args, **kwargs)

        return decorated_function
    return decorator
