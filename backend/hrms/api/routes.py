"""
Route configuration for the API.

Order matters: literal paths such as /api/employees/me are listed before
the templated /api/employees/{id} that would otherwise shadow them.
"""

from typing import Callable

from sqlalchemy.orm import Session

from hrms.api.auth import AuthController
from hrms.api.employees import EmployeeController
from hrms.dispatch.routes import RouteSpec
from hrms.tenancy.constants import RBAC_MIDDLEWARE, TENANT_MIDDLEWARE
from hrms.tenancy.sessions import SessionStore

TENANT_RBAC = (TENANT_MIDDLEWARE, RBAC_MIDDLEWARE)


def build_routes(session_factory: Callable[[], Session], session_store: SessionStore) -> list[RouteSpec]:
    auth = AuthController(session_factory, session_store)
    employees = EmployeeController(session_factory)

    return [
        # Authentication
        RouteSpec("POST", "/api/auth/login", auth.login, auth=False),
        RouteSpec("POST", "/api/auth/logout", auth.logout),
        RouteSpec("GET", "/api/auth/me", auth.me),
        # Employees
        RouteSpec(
            "GET",
            "/api/employees",
            employees.index,
            permission="employee.view",
            middleware=TENANT_RBAC,
        ),
        RouteSpec(
            "GET",
            "/api/employees/me",
            employees.me,
            permission="employee.view_own",
            middleware=TENANT_RBAC,
        ),
        RouteSpec(
            "GET",
            "/api/employees/{id}",
            employees.show,
            permission="employee.view",
            middleware=TENANT_RBAC,
        ),
    ]
