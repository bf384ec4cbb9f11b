"""
Role-based access control middleware.

Decision table for one request:

    no permission required               -> allow
    permission required, anonymous       -> 401
    permission required, super role      -> allow
    permission required, has permission  -> allow
    permission required, lacks it        -> 403 naming the permission

The super-role bypass is deliberate: members of SUPER_ROLE pass every
check whatever the role_permissions table says.
"""

from __future__ import annotations

import logging
from typing import Optional

from hrms.core.metrics import record_access_denied
from hrms.dispatch.chain import Next
from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse
from hrms.tenancy.constants import SUPER_ROLE

logger = logging.getLogger(__name__)


def is_super_role(role_name: Optional[str]) -> bool:
    return role_name == SUPER_ROLE


def missing_permission_message(permission: str) -> str:
    return f"You don't have permission to perform this action. Required: {permission}"


class RBACMiddleware:
    def handle(self, ctx: RequestContext, next: Next) -> ApiResponse:
        required = ctx.required_permission
        if not required:
            return next(ctx)

        if not ctx.is_authenticated():
            record_access_denied("rbac", "UNAUTHORIZED")
            return ApiResponse.unauthorized("Authentication required")

        if is_super_role(ctx.role_name()):
            return next(ctx)

        if not ctx.has_permission(required):
            logger.info(
                "rbac.denied",
                extra={
                    "request_id": ctx.request_id,
                    "user_id": ctx.user_id(),
                    "company_id": ctx.company_id,
                    "permission": required,
                },
            )
            record_access_denied("rbac", "FORBIDDEN")
            return ApiResponse.forbidden(missing_permission_message(required))

        return next(ctx)
