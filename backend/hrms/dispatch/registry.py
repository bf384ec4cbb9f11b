from __future__ import annotations

from typing import Iterable

from hrms.dispatch.chain import MiddlewareLike


class MiddlewareRegistry:
    """Maps middleware identifiers used in route config to constructed instances."""

    def __init__(self) -> None:
        self._entries: dict[str, MiddlewareLike] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def register(self, name: str, middleware: MiddlewareLike) -> None:
        if name in self._entries:
            raise ValueError(f"Middleware '{name}' is already registered")
        self._entries[name] = middleware

    def resolve(self, name: str) -> MiddlewareLike:
        try:
            return self._entries[name]
        except KeyError:
            raise KeyError(f"Unknown middleware '{name}'") from None

    def resolve_all(self, names: Iterable[str]) -> list[MiddlewareLike]:
        return [self.resolve(name) for name in names]

    def missing(self, names: Iterable[str]) -> list[str]:
        return [name for name in names if name not in self._entries]
