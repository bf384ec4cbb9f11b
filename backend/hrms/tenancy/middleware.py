"""
Tenant middleware: guarantees a company id is on the context.

Filtering happens in the data-access helpers (see tenancy.scoping), which
take ctx.company_id as a mandatory predicate.
"""

import logging

from hrms.core.metrics import record_access_denied
from hrms.dispatch.chain import Next
from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse

logger = logging.getLogger(__name__)


class TenantMiddleware:
    def handle(self, ctx: RequestContext, next: Next) -> ApiResponse:
        # Must run after AuthenticationMiddleware.
        if not ctx.is_authenticated():
            record_access_denied("tenant", "UNAUTHORIZED")
            return ApiResponse.unauthorized("Authentication required")

        if ctx.company_id is None:
            # An authenticated principal without a company means the pipeline is broken.
            logger.error(
                "tenant.context_missing",
                extra={"request_id": ctx.request_id, "user_id": ctx.user_id(), "route": ctx.route_pattern},
            )
            record_access_denied("tenant", "SERVER_ERROR")
            return ApiResponse.server_error("Company context not available")

        return next(ctx)
