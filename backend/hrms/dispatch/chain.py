"""
Middleware chain executor.

Each middleware gets the context and a ``next`` continuation. Calling
``next(ctx)`` runs the rest of the chain; returning a response without
calling it short-circuits everything further in.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence, Union

from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse

Next = Callable[[RequestContext], ApiResponse]


class Middleware(Protocol):
    def handle(self, ctx: RequestContext, next: Next) -> ApiResponse:
        ...


MiddlewareLike = Union[Middleware, Callable[[RequestContext, Next], ApiResponse]]


def _invoke(middleware: MiddlewareLike, ctx: RequestContext, next: Next) -> ApiResponse:
    handle = getattr(middleware, "handle", None)
    if handle is not None:
        return handle(ctx, next)
    return middleware(ctx, next)


def run_chain(
    middleware: Sequence[MiddlewareLike],
    ctx: RequestContext,
    handler: Callable[[RequestContext], ApiResponse],
) -> ApiResponse:
    """Run ``middleware`` outer to inner around ``handler``."""

    def step(index: int) -> Next:
        if index == len(middleware):
            return handler

        def call(current: RequestContext) -> ApiResponse:
            return _invoke(middleware[index], current, step(index + 1))

        return call

    return step(0)(ctx)
