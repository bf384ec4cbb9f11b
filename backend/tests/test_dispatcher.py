import os

import pytest
from prometheus_client import REGISTRY

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret")
os.environ.setdefault("SKIP_CREATE_ALL", "1")

from hrms.dispatch.dispatcher import Dispatcher, assemble_chain
from hrms.dispatch.registry import MiddlewareRegistry
from hrms.dispatch.routes import RouteTable
from hrms.tenancy.authentication import AuthenticationMiddleware
from hrms.tenancy.middleware import TenantMiddleware
from hrms.tenancy.rbac import RBACMiddleware
from hrms.tenancy.sessions import InMemorySessionStore
from tests.factories import FakeIdentityStore, Recorder, make_context, make_identity


class Counting:
    """Wraps a middleware and counts how often it runs."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = 0

    def handle(self, ctx, next):
        self.calls += 1
        return self.inner.handle(ctx, next)


EMPLOYEE = make_identity(user_id=1, company_id=100, role_id=3, role_name="Employee")
ADMIN = make_identity(user_id=2, company_id=100, role_id=1, role_name="Admin")


@pytest.fixture
def pipeline():
    sessions = InMemorySessionStore(ttl_seconds=0)
    identity_store = FakeIdentityStore(
        [EMPLOYEE, ADMIN],
        permissions_by_role={3: ["payroll.view_own", "employee.view_own"], 1: []},
    )
    auth = Counting(AuthenticationMiddleware(sessions, identity_store))
    tenant = Counting(TenantMiddleware())
    rbac = Counting(RBACMiddleware())
    registry = MiddlewareRegistry()
    registry.register("auth", auth)
    registry.register("tenant", tenant)
    registry.register("rbac", rbac)

    handlers = {
        "process": Recorder("payroll.process"),
        "show": Recorder("employees.show"),
        "login": Recorder("auth.login"),
    }
    table = RouteTable()
    table.post("/api/auth/login", handlers["login"], auth=False)
    table.post(
        "/api/payroll/process",
        handlers["process"],
        permission="payroll.create",
        middleware=["tenant", "rbac"],
    )
    table.get(
        "/api/employees/{id}",
        handlers["show"],
        permission="employee.view_own",
        middleware=["auth", "tenant", "rbac"],
    )
    dispatcher = Dispatcher(table, registry)
    dispatcher.validate()

    def login(identity):
        return sessions.create({"user": identity.to_session(), "permissions": []})

    counters = {"auth": auth, "tenant": tenant, "rbac": rbac}
    return dispatcher, handlers, counters, login


def test_unmatched_route_is_404_without_running_middleware(pipeline):
    dispatcher, handlers, counters, _ = pipeline

    response = dispatcher.dispatch(make_context("GET", "/api/unknown"))

    assert response.status_code == 404
    assert response.body["error"] == {"code": "NOT_FOUND", "message": "Endpoint not found"}
    assert all(counter.calls == 0 for counter in counters.values())
    assert all(handler.calls == 0 for handler in handlers.values())


def test_wrong_method_is_404(pipeline):
    dispatcher, _, _, _ = pipeline
    assert dispatcher.dispatch(make_context("DELETE", "/api/payroll/process")).status_code == 404


def test_public_route_skips_auth(pipeline):
    dispatcher, handlers, counters, _ = pipeline

    response = dispatcher.dispatch(make_context("POST", "/api/auth/login"))

    assert response.status_code == 200
    assert handlers["login"].calls == 1
    assert counters["auth"].calls == 0


def test_auth_short_circuit_stops_tenant_rbac_and_handler(pipeline):
    dispatcher, handlers, counters, _ = pipeline

    response = dispatcher.dispatch(make_context("POST", "/api/payroll/process"))

    assert response.status_code == 401
    assert counters["auth"].calls == 1
    assert counters["tenant"].calls == 0
    assert counters["rbac"].calls == 0
    assert handlers["process"].calls == 0


def test_non_admin_without_permission_gets_named_403(pipeline):
    dispatcher, handlers, counters, login = pipeline
    ctx = make_context("POST", "/api/payroll/process", session_id=login(EMPLOYEE))

    response = dispatcher.dispatch(ctx)

    assert response.status_code == 403
    assert "payroll.create" in response.body["error"]["message"]
    assert counters["rbac"].calls == 1
    assert handlers["process"].calls == 0


def test_admin_without_explicit_grant_reaches_handler(pipeline):
    dispatcher, handlers, _, login = pipeline
    ctx = make_context("POST", "/api/payroll/process", session_id=login(ADMIN))

    response = dispatcher.dispatch(ctx)

    assert response.status_code == 200
    assert handlers["process"].calls == 1
    assert ctx.route_pattern == "/api/payroll/process"
    assert ctx.required_permission == "payroll.create"


def test_explicit_auth_entry_runs_once(pipeline):
    dispatcher, handlers, counters, login = pipeline
    ctx = make_context("GET", "/api/employees/12", session_id=login(EMPLOYEE))

    response = dispatcher.dispatch(ctx)

    assert response.status_code == 200
    assert response.body["data"]["params"] == {"id": "12"}
    assert counters["auth"].calls == 1
    assert handlers["show"].calls == 1


def test_dispatch_is_deterministic(pipeline):
    dispatcher, _, _, login = pipeline
    session_id = login(EMPLOYEE)

    bodies = [
        dispatcher.dispatch(make_context("GET", "/api/employees/7", session_id=session_id)).body
        for _ in range(5)
    ]
    assert all(body == bodies[0] for body in bodies)


def test_handler_exceptions_propagate(pipeline):
    dispatcher, _, _, _ = pipeline

    def explode(ctx):
        raise RuntimeError("boom")

    dispatcher.routes.post("/api/explode", explode, auth=False)
    with pytest.raises(RuntimeError):
        dispatcher.dispatch(make_context("POST", "/api/explode"))


def test_dispatch_outcomes_are_counted(pipeline):
    dispatcher, _, _, _ = pipeline
    labels = {"route": "/api/payroll/process", "outcome": "short_circuit"}
    before = REGISTRY.get_sample_value("hrms_dispatch_total", labels) or 0

    dispatcher.dispatch(make_context("POST", "/api/payroll/process"))

    after = REGISTRY.get_sample_value("hrms_dispatch_total", labels)
    assert after == before + 1


def _route(table, method, path, **options):
    return table.register(method, path, Recorder(), **options)


def test_assemble_chain_prepends_auth_once():
    table = RouteTable()
    implicit = _route(table, "GET", "/a", middleware=["tenant", "rbac"])
    explicit = _route(table, "GET", "/b", middleware=["auth", "tenant", "rbac"])
    explicit_later = _route(table, "GET", "/c", middleware=["tenant", "auth"])
    public = _route(table, "GET", "/d", auth=False, middleware=["tenant"])

    assert assemble_chain([], implicit) == ["auth", "tenant", "rbac"]
    assert assemble_chain([], explicit) == ["auth", "tenant", "rbac"]
    assert assemble_chain([], explicit_later).count("auth") == 1
    assert assemble_chain([], public) == ["tenant"]


def test_assemble_chain_puts_global_middleware_before_route_middleware():
    table = RouteTable()
    route = _route(table, "GET", "/a", middleware=["tenant"])
    public = _route(table, "GET", "/b", auth=False)

    assert assemble_chain(["cors"], route) == ["auth", "cors", "tenant"]
    assert assemble_chain(["cors"], public) == ["cors"]


def test_global_middleware_runs_for_every_matched_route():
    global_mw = Recorder("global")
    registry = MiddlewareRegistry()
    registry.register("auth", Recorder("auth"))
    registry.register("global", global_mw)
    table = RouteTable()
    table.get("/a", Recorder(), auth=False)
    table.get("/b", Recorder())
    dispatcher = Dispatcher(table, registry, global_middleware=["global"])

    dispatcher.dispatch(make_context("GET", "/a"))
    dispatcher.dispatch(make_context("GET", "/b"))
    dispatcher.dispatch(make_context("GET", "/missing"))

    assert global_mw.calls == 2


def test_validate_reports_unknown_middleware():
    registry = MiddlewareRegistry()
    registry.register("auth", Recorder())
    table = RouteTable()
    table.get("/api/reports", Recorder(), middleware=["tenant", "audit"])

    with pytest.raises(ValueError, match="tenant, audit"):
        Dispatcher(table, registry).validate()
