# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for bearer token parsing and caller identity.

Issue and claim endpoints are public; a valid token, when present, only
names the actor recorded in issue history.
"""

from dataclasses import dataclass
from functools import wraps
from flask import request, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from services.auth import TokenValidationError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


@dataclass
class UserContext:
    """Identity carried by a validated token."""
    user_id: str
    role: str
    email: Optional[str] = None

    @property
    def actor(self) -> str:
        """Name recorded on history entries written by this caller."""
        return self.email or self.role

    @classmethod
    def from_token_payload(cls, payload: Dict[str, Any]) -> 'UserContext':
        return cls(user_id=payload["sub"], role=payload.get("role", "citizen"), email=payload.get("email"))


def extract_token_from_request() -> Optional[str]:
    """
    Extract the bearer token from the Authorization header.

    Returns:
        Token string or None if not found
    """
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[7:] or None
    return auth_header or None


def optional_auth(f: Callable) -> Callable:
    """
    Decorator passing ``user_context`` (or None) to the route.

    Invalid or expired tokens are treated as anonymous callers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user_context = None

        token = extract_token_from_request()
        if token:
            with tracer.start_as_current_span("auth.middleware.optional_auth") as span:
                try:
                    payload = current_app.auth_service.validate_token(token)
                    user_context = UserContext.from_token_payload(payload)
                    g.user_context = user_context
                    span.set_attributes({"auth.result": "success", "user.id": user_context.user_id})
                except (TokenValidationError, KeyError) as e:
                    span.set_attribute("auth.result", "invalid_token")
                    logger.debug(f"Ignoring invalid token on optional auth route: {e}")

        return f(*args, user_context=user_context, **kwargs)

    return decorated_function
