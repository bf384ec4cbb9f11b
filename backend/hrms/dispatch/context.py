"""
Per-request context carried through the middleware chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from hrms.core.config import settings
from hrms.tenancy.identity import Identity


@dataclass(frozen=True)
class Pagination:
    page: int
    per_page: int
    offset: int


def normalize_path(path: str) -> str:
    return "/" + (path or "").strip("/")


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class RequestContext:
    """
    Request data plus the identity, tenant and permission state that the
    access-control middleware populate. Owned by a single request; the
    read helpers below never touch the store.
    """

    method: str
    path: str
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    session_id: Optional[str] = None
    request_id: Optional[str] = None

    # Populated by the pipeline.
    route_pattern: Optional[str] = None
    required_permission: Optional[str] = None
    user: Optional[Identity] = None
    company_id: Optional[int] = None
    permissions: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.path = normalize_path(self.path)
        self.headers = {key.lower(): value for key, value in (self.headers or {}).items()}

    def input(self, key: str, default: Any = None) -> Any:
        return self.body.get(key, default)

    def query_param(self, key: str, default: Any = None) -> Any:
        return self.query.get(key, default)

    def param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def header(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(key.lower(), default)

    def authenticate(self, identity: Identity, permissions: Iterable[str]) -> None:
        self.user = identity
        self.company_id = identity.company_id
        self.permissions = frozenset(permissions)

    def is_authenticated(self) -> bool:
        return self.user is not None

    def user_id(self) -> Optional[int]:
        return self.user.id if self.user else None

    def employee_id(self) -> Optional[int]:
        return self.user.employee_id if self.user else None

    def role_name(self) -> Optional[str]:
        return self.user.role_name if self.user else None

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return not self.permissions.isdisjoint(permissions)

    def pagination(self, default_per_page: Optional[int] = None) -> Pagination:
        default_per_page = default_per_page or settings.DEFAULT_PER_PAGE
        page = max(1, _to_int(self.query.get("page"), 1))
        per_page = _to_int(self.query.get("per_page"), default_per_page)
        per_page = min(settings.MAX_PER_PAGE, max(1, per_page))
        return Pagination(page=page, per_page=per_page, offset=(page - 1) * per_page)


def build_context(
    method: str,
    path: str,
    *,
    query: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    headers: Optional[Mapping[str, str]] = None,
    session_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> RequestContext:
    return RequestContext(
        method=method,
        path=path,
        query=dict(query or {}),
        # Only JSON objects are accepted as bodies.
        body=dict(body) if isinstance(body, Mapping) else {},
        headers=dict(headers or {}),
        session_id=session_id,
        request_id=request_id,
    )
