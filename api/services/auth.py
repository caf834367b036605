# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for bearer token issuing and validation.

Tokens are HS256-signed JWTs carrying the caller's owner id in ``sub`` and
their account kind in ``role``.
"""

import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from opentelemetry import trace
import logging

from models.enums import OwnerKind

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_ACCESS_TOKEN_EXPIRES = 900


class AuthenticationError(Exception):
    """Raised when a token cannot be issued."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """
    JWT service for the accounts that own contract forms.

    Account management lives elsewhere; this service only signs development
    tokens and validates incoming ones.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expires: Optional[int] = None
    ):
        """
        Initialize the authentication service.

        Args:
            secret: Shared signing secret, defaults to ``JWT_SECRET``
            algorithm: Signing algorithm, defaults to ``JWT_ALGORITHM`` or HS256
            access_token_expires: Token lifetime in seconds
        """
        self.secret = secret or self._get_secret()
        self.algorithm = algorithm or os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expires = access_token_expires or int(
            os.getenv("JWT_ACCESS_TOKEN_EXPIRES", str(DEFAULT_ACCESS_TOKEN_EXPIRES))
        )

    def _get_secret(self) -> str:
        secret = os.getenv("JWT_SECRET")
        if not secret:
            raise ValueError("JWT_SECRET environment variable is required")
        return secret

    def issue_token(
        self,
        owner_id: str,
        owner_kind: OwnerKind,
        email: Optional[str] = None,
        name: Optional[str] = None
    ) -> str:
        """
        Sign an access token for an agency, business or worker.

        Args:
            owner_id: ID of the owner document
            owner_kind: Account kind, stored in the ``role`` claim
            email: Optional email claim
            name: Optional display name claim

        Returns:
            Encoded JWT
        """
        owner_kind = OwnerKind(owner_kind)

        with tracer.start_as_current_span("auth.issue_token") as span:
            span.set_attributes({
                "auth.operation": "issue_token",
                "owner.id": owner_id,
                "owner.kind": owner_kind.value
            })

            now = datetime.now(timezone.utc)
            expires_at = now + timedelta(seconds=self.access_token_expires)

            payload = {
                "sub": owner_id,
                "role": owner_kind.value,
                "iat": now,
                "exp": expires_at,
                "type": "access"
            }
            if email:
                payload["email"] = email
            if name:
                payload["name"] = name

            try:
                token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
            except Exception as e:
                logger.error(f"Token generation failed: {str(e)}")
                raise AuthenticationError(f"Failed to generate token: {str(e)}")

            logger.info(
                "Access token issued",
                extra={
                    "owner_id": owner_id,
                    "owner_kind": owner_kind.value,
                    "expires_at": expires_at.isoformat()
                }
            )
            return token

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Raises:
            TokenValidationError: If token is invalid, expired, or lacks the
                ``sub`` and ``role`` claims
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attribute("auth.operation", "validate_token")

            try:
                payload = jwt.decode(
                    token,
                    self.secret,
                    algorithms=[self.algorithm],
                    options={"require": ["sub", "exp"]}
                )
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")

            try:
                OwnerKind(payload.get("role"))
            except ValueError:
                span.set_attribute("auth.validation_result", "invalid_role")
                raise TokenValidationError(f"Invalid token role: {payload.get('role')}")

            span.set_attributes({
                "auth.validation_result": "success",
                "owner.id": payload["sub"],
                "owner.kind": payload["role"]
            })
            logger.debug(
                "Token validated successfully",
                extra={"owner_id": payload["sub"], "owner_kind": payload["role"]}
            )
            return payload
