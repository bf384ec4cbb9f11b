"""
Authentication middleware: session -> verified identity -> context.

The user is re-loaded from the store on every request, filtered to active
accounts, so deactivation or a role change takes effect on the next call
rather than the next login. Whether the session was empty or the user is no
longer active is never revealed to the caller.
"""

from __future__ import annotations

import logging

from hrms.core.metrics import record_access_denied
from hrms.dispatch.chain import Next
from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse
from hrms.tenancy.constants import SESSION_PERMISSIONS_KEY, SESSION_USER_KEY
from hrms.tenancy.identity import IdentityStore
from hrms.tenancy.sessions import SessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired or user inactive"


def _session_user_id(payload) -> int | None:
    if not payload:
        return None
    user = payload.get(SESSION_USER_KEY) or {}
    user_id = user.get("id")
    if user_id in (None, "", 0):
        return None
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


class AuthenticationMiddleware:
    def __init__(self, session_store: SessionStore, identity_store: IdentityStore) -> None:
        self.session_store = session_store
        self.identity_store = identity_store

    def handle(self, ctx: RequestContext, next: Next) -> ApiResponse:
        payload = self.session_store.get(ctx.session_id) if ctx.session_id else None
        user_id = _session_user_id(payload)
        if user_id is None:
            logger.info("auth.no_session", extra={"request_id": ctx.request_id, "path": ctx.path})
            record_access_denied("auth", "UNAUTHORIZED")
            return ApiResponse.unauthorized("Authentication required")

        identity = self.identity_store.find_active_user_by_id(user_id)
        if identity is None:
            self.session_store.destroy(ctx.session_id)
            logger.warning(
                "auth.session_rejected",
                extra={"request_id": ctx.request_id, "user_id": user_id},
            )
            record_access_denied("auth", "UNAUTHORIZED")
            return ApiResponse.unauthorized(SESSION_EXPIRED_MESSAGE)

        permissions = sorted(set(self.identity_store.find_permissions_by_role(identity.role_id)))
        ctx.authenticate(identity, permissions)

        # Keep the session in step with role/permission changes made mid-session.
        self.session_store.set(
            ctx.session_id,
            {
                SESSION_USER_KEY: identity.to_session(),
                SESSION_PERMISSIONS_KEY: permissions,
            },
        )
        return next(ctx)
