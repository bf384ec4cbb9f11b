"""
Dispatcher: route match -> chain assembly -> chain execution.

Chain order for a matched route is the global middleware followed by the
route's own middleware, with the authentication middleware prepended when
the route requires auth and does not already list it. Unmatched requests
get a 404 without running any middleware. Exceptions raised by handlers
propagate to the HTTP layer untouched.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from hrms.core.metrics import record_dispatch
from hrms.dispatch.chain import run_chain
from hrms.dispatch.context import RequestContext
from hrms.dispatch.registry import MiddlewareRegistry
from hrms.dispatch.responses import ApiResponse
from hrms.dispatch.routes import Route, RouteTable
from hrms.tenancy.constants import AUTH_MIDDLEWARE

logger = logging.getLogger(__name__)


def assemble_chain(
    global_middleware: Sequence[str],
    route: Route,
    *,
    auth_middleware: str = AUTH_MIDDLEWARE,
) -> list[str]:
    chain = list(global_middleware) + list(route.middleware)
    if route.auth and auth_middleware not in chain:
        chain.insert(0, auth_middleware)
    return chain


class Dispatcher:
    def __init__(
        self,
        routes: RouteTable,
        registry: MiddlewareRegistry,
        *,
        global_middleware: Iterable[str] = (),
        auth_middleware: str = AUTH_MIDDLEWARE,
    ) -> None:
        self.routes = routes
        self.registry = registry
        self.global_middleware = tuple(global_middleware)
        self.auth_middleware = auth_middleware

    def chain_for(self, route: Route) -> list[str]:
        return assemble_chain(self.global_middleware, route, auth_middleware=self.auth_middleware)

    def validate(self) -> None:
        """Fail fast at startup if any route names an unregistered middleware."""
        problems = []
        for route in self.routes:
            missing = self.registry.missing(self.chain_for(route))
            if missing:
                problems.append(f"{route.method} {route.path}: {', '.join(missing)}")
        if problems:
            raise ValueError("Unknown middleware referenced by routes: " + "; ".join(problems))

    def dispatch(self, ctx: RequestContext) -> ApiResponse:
        found = self.routes.match(ctx.method, ctx.path)
        if found is None:
            logger.info(
                "dispatch.not_found",
                extra={"request_id": ctx.request_id, "method": ctx.method, "path": ctx.path},
            )
            record_dispatch("unmatched", "not_found")
            return ApiResponse.not_found("Endpoint not found")

        route = found.route
        ctx.params.update(found.params)
        ctx.route_pattern = route.path
        if route.permission:
            ctx.required_permission = route.permission

        middleware = self.registry.resolve_all(self.chain_for(route))
        reached = []

        def terminal(current: RequestContext) -> ApiResponse:
            reached.append(True)
            return route.handler(current)

        response = run_chain(middleware, ctx, terminal)
        record_dispatch(route.path, "handled" if reached else "short_circuit")
        return response
