"""
Flask decorators and request helpers for authorization and response caching.

Admin endpoints are gated by a shared secret in the ``X-Admin-Key`` header.
Profile mutations are authorized against the static RBAC table using the
acting identity forwarded by the gateway in ``X-User-Role`` / ``X-User-Id``.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import current_app, g, request

from kada_connect.core import rbac
from kada_connect.core.errors import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "X-Admin-Key"
USER_ROLE_HEADER = "X-User-Role"
USER_ID_HEADER = "X-User-Id"


# ============================================================================
# Admin key
# ============================================================================

def _log_admin_attempt(provided_key: str, success: bool) -> None:
    """Log an admin-key attempt without leaking the key.

    Only a truncated SHA256 of the provided key is logged.
    """
    key_hash = hashlib.sha256(provided_key.encode()).hexdigest()[:12]
    status = "SUCCESS" if success else "FAILED"
    logger.info(
        f"{status} admin key | key_hash={key_hash} | path={request.path} | "
        f"request_id={g.get('request_id', 'none')} | client_ip={request.remote_addr}"
    )


def require_admin_key(fn):
    """
    Require a valid ``X-Admin-Key`` header.

    Raises:
        AuthenticationError (401): header missing or empty
        ForbiddenError (403): key does not match the configured secret
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        provided_key = request.headers.get(ADMIN_KEY_HEADER, "")
        if not provided_key:
            logger.warning(f"Admin request without {ADMIN_KEY_HEADER} header: {request.path}")
            raise AuthenticationError("Admin access required")

        expected_key = current_app.config["APP_CONFIG"].admin_api_key or ""
        # Constant-time comparison (timing-attack safe)
        valid = bool(expected_key) and hmac.compare_digest(provided_key.encode(), expected_key.encode())
        _log_admin_attempt(provided_key, valid)
        if not valid:
            raise ForbiddenError("Invalid admin key")

        return fn(*args, **kwargs)

    return wrapper


# ============================================================================
# Acting identity + RBAC
# ============================================================================

@dataclass(frozen=True)
class Actor:
    role: str
    user_id: Optional[str]


def current_actor() -> Optional[Actor]:
    """Identity forwarded by the gateway, or None when absent."""
    role = request.headers.get(USER_ROLE_HEADER, "").strip().lower()
    if not role:
        return None
    user_id = request.headers.get(USER_ID_HEADER, "").strip() or None
    return Actor(role=role, user_id=user_id)


def authorize(resource: str, action: str, resource_user_id: Optional[str] = None) -> Actor:
    """Check the acting identity against the RBAC table.

    Args:
        resource: RBAC resource (``students``, ``companies``...)
        action: RBAC action (``create``, ``update``...)
        resource_user_id: Owner of the record being touched, when known

    Returns:
        The authorized actor

    Raises:
        AuthenticationError: no acting identity on the request
        ForbiddenError: the role lacks the permission or does not own the record
    """
    actor = current_actor()
    if actor is None:
        raise AuthenticationError("Authentication required")

    permission = rbac.check_permission(actor.role, resource, action)
    if permission is None:
        logger.warning(f"RBAC denied: role={actor.role} resource={resource} action={action}")
        raise ForbiddenError(f"Forbidden: role '{actor.role}' cannot {action} {resource}")

    # Own-scoped permissions always need both identities; a missing owner is not a wildcard
    if permission.own:
        context = {"user_id": actor.user_id, "resource_user_id": resource_user_id}
        if not actor.user_id or not resource_user_id or not rbac.has_permission(
            actor.role, resource, action, context
        ):
            logger.warning(
                f"RBAC ownership denied: role={actor.role} user={actor.user_id} "
                f"owner={resource_user_id} resource={resource} action={action}"
            )
            raise ForbiddenError(f"Forbidden: you can only {action} your own {resource} profile")

    return actor


# ============================================================================
# Response caching headers
# ============================================================================

def cache_control(max_age: int, private: bool = False):
    """Add ``Cache-Control`` to successful responses of the decorated view."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            response = current_app.make_response(fn(*args, **kwargs))
            if response.status_code == 200:
                scope = "private" if private else "public"
                response.headers["Cache-Control"] = f"{scope}, max-age={max_age}, must-revalidate"
                response.vary.add("Accept-Encoding")
            return response
        return wrapper
    return decorator
