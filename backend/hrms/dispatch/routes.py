"""
Route table: (method, path pattern) -> handler + access requirements.

Patterns use ``{name}`` placeholders, each matching one path segment.
Routes are matched in registration order and the first match wins, so a
literal path such as ``/api/employees/me`` must be registered before
``/api/employees/{id}``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional, Sequence

from hrms.dispatch.context import RequestContext, normalize_path
from hrms.dispatch.responses import ApiResponse

Handler = Callable[[RequestContext], ApiResponse]

_PLACEHOLDER_RE = re.compile(r"\{([a-zA-Z_]+)\}")
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")


def compile_path(pattern: str) -> re.Pattern:
    """Turn ``/employees/{id}`` into an anchored regex with named groups."""
    parts = []
    position = 0
    for match in _PLACEHOLDER_RE.finditer(pattern):
        parts.append(re.escape(pattern[position:match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+)")
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("^" + "".join(parts) + "$")


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: Handler
    permission: Optional[str] = None
    auth: bool = True
    middleware: tuple[str, ...] = ()
    pattern: re.Pattern = field(default=None, compare=False, repr=False)

    def match(self, method: str, path: str) -> Optional[dict[str, str]]:
        if method != self.method:
            return None
        found = self.pattern.match(path)
        if found is None:
            return None
        return found.groupdict()


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: dict[str, str]


@dataclass(frozen=True)
class RouteSpec:
    """Declarative route entry, as listed in the application's route config."""

    method: str
    path: str
    handler: Handler
    auth: bool = True
    permission: Optional[str] = None
    middleware: Sequence[str] = ()


class RouteTable:
    def __init__(self) -> None:
        self._routes: list[Route] = []

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def register(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        permission: Optional[str] = None,
        auth: bool = True,
        middleware: Iterable[str] = (),
    ) -> Route:
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        if not callable(handler):
            raise TypeError(f"Handler for {method} {path} is not callable")
        path = normalize_path(path)
        route = Route(
            method=method,
            path=path,
            handler=handler,
            permission=permission or None,
            auth=auth,
            middleware=tuple(middleware),
            pattern=compile_path(path),
        )
        self._routes.append(route)
        return route

    def get(self, path: str, handler: Handler, **options) -> Route:
        return self.register("GET", path, handler, **options)

    def post(self, path: str, handler: Handler, **options) -> Route:
        return self.register("POST", path, handler, **options)

    def put(self, path: str, handler: Handler, **options) -> Route:
        return self.register("PUT", path, handler, **options)

    def delete(self, path: str, handler: Handler, **options) -> Route:
        return self.register("DELETE", path, handler, **options)

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        method = method.upper()
        path = normalize_path(path)
        for route in self._routes:
            params = route.match(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None


def register_routes(table: RouteTable, entries: Iterable[RouteSpec]) -> RouteTable:
    for entry in entries:
        table.register(
            entry.method,
            entry.path,
            entry.handler,
            permission=entry.permission,
            auth=entry.auth,
            middleware=entry.middleware,
        )
    return table
