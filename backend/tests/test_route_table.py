import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret")
os.environ.setdefault("SKIP_CREATE_ALL", "1")

from hrms.dispatch.routes import RouteSpec, RouteTable, compile_path, register_routes


def _handler(ctx):
    return None


def test_compile_path_matches_single_segment_placeholders():
    pattern = compile_path("/api/employees/{id}/leave/{leave_id}")
    found = pattern.match("/api/employees/7/leave/42")
    assert found.groupdict() == {"id": "7", "leave_id": "42"}
    assert pattern.match("/api/employees/7/8/leave/42") is None
    assert pattern.match("/api/employees/7/leave/42/extra") is None


def test_match_returns_route_and_params():
    table = RouteTable()
    route = table.get("/api/employees/{id}", _handler, permission="employee.view")

    found = table.match("GET", "/api/employees/15")

    assert found.route is route
    assert found.params == {"id": "15"}
    assert found.route.permission == "employee.view"


def test_match_is_method_sensitive():
    table = RouteTable()
    table.post("/api/auth/login", _handler, auth=False)

    assert table.match("GET", "/api/auth/login") is None
    assert table.match("post", "/api/auth/login") is not None


def test_unmatched_path_returns_none():
    table = RouteTable()
    table.get("/api/employees", _handler)

    assert table.match("GET", "/api/nothing-here") is None


def test_first_registered_route_wins():
    table = RouteTable()
    literal = table.get("/api/employees/me", _handler)
    templated = table.get("/api/employees/{id}", _handler)

    assert table.match("GET", "/api/employees/me").route is literal
    assert table.match("GET", "/api/employees/3").route is templated


def test_templated_route_registered_first_shadows_literal():
    table = RouteTable()
    templated = table.get("/api/employees/{id}", _handler)
    table.get("/api/employees/me", _handler)

    found = table.match("GET", "/api/employees/me")
    assert found.route is templated
    assert found.params == {"id": "me"}


def test_match_is_deterministic():
    table = RouteTable()
    table.get("/api/employees/{id}", _handler)
    table.get("/api/employees/{id}/history", _handler)

    results = {
        (found.route.path, tuple(found.params.items()))
        for found in (table.match("GET", "/api/employees/9/history") for _ in range(20))
    }
    assert results == {("/api/employees/{id}/history", (("id", "9"),))}


def test_trailing_slash_is_normalized():
    table = RouteTable()
    table.get("/api/employees/", _handler)

    assert table.match("GET", "/api/employees") is not None
    assert table.match("GET", "/api/employees/") is not None


def test_register_rejects_unknown_method_and_non_callable_handler():
    table = RouteTable()
    with pytest.raises(ValueError):
        table.register("PATCH", "/api/employees", _handler)
    with pytest.raises(TypeError):
        table.register("GET", "/api/employees", "not-callable")


def test_register_routes_from_declarative_entries():
    table = register_routes(
        RouteTable(),
        [
            RouteSpec("POST", "/api/auth/login", _handler, auth=False),
            RouteSpec(
                "GET",
                "/api/payroll",
                _handler,
                permission="payroll.view",
                middleware=["tenant", "rbac"],
            ),
        ],
    )

    assert len(table) == 2
    login, payroll = table.routes
    assert login.auth is False
    assert payroll.auth is True
    assert payroll.middleware == ("tenant", "rbac")
    assert payroll.permission == "payroll.view"
