from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "rbac-audit-placeholder")

sys.path.append(str(ROOT / "backend"))

from hrms.api.routes import build_routes  # noqa: E402
from hrms.core.db import SessionLocal  # noqa: E402
from hrms.dispatch.dispatcher import assemble_chain  # noqa: E402
from hrms.dispatch.routes import Route, RouteTable, register_routes  # noqa: E402
from hrms.tenancy.constants import RBAC_MIDDLEWARE, TENANT_MIDDLEWARE  # noqa: E402
from hrms.tenancy.permissions import PERMISSIONS  # noqa: E402
from hrms.tenancy.sessions import InMemorySessionStore  # noqa: E402


PUBLIC_ROUTES = {
    ("POST", "/api/auth/login"),
}

# Authenticated routes that act on the caller's own session only.
SESSION_ONLY_ROUTES = {
    ("POST", "/api/auth/logout"),
    ("GET", "/api/auth/me"),
}


def audit_route(route: Route) -> list[str]:
    key = (route.method, route.path)
    chain = assemble_chain((), route)
    problems = []
    if not route.auth:
        if key not in PUBLIC_ROUTES:
            problems.append("public route not in allowlist")
        return problems
    if key in SESSION_ONLY_ROUTES:
        return problems
    if not route.permission:
        problems.append("no required permission")
    elif route.permission not in PERMISSIONS:
        problems.append(f"unknown permission '{route.permission}'")
    if route.permission and RBAC_MIDDLEWARE not in chain:
        problems.append("permission set but rbac middleware missing")
    if TENANT_MIDDLEWARE not in chain:
        problems.append("tenant middleware missing")
    return problems


def audit_table(table: RouteTable) -> list[tuple[str, str, str]]:
    issues = []
    for route in table:
        for problem in audit_route(route):
            issues.append((route.method, route.path, problem))
    return issues


def main() -> int:
    table = register_routes(RouteTable(), build_routes(SessionLocal, InMemorySessionStore()))
    issues = audit_table(table)

    if issues:
        print("RBAC audit: routes with incomplete access control")
        for method, path, problem in issues:
            print(f"- {method} {path}: {problem}")
        return 1

    print("RBAC audit: every route is public, session-only or tenant+rbac guarded.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
