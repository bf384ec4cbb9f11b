import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret")
os.environ.setdefault("SKIP_CREATE_ALL", "1")

from hrms.tenancy.authentication import AuthenticationMiddleware
from hrms.tenancy.sessions import InMemorySessionStore
from tests.factories import FakeIdentityStore, Recorder, make_context, make_identity


def _setup(identities=(), permissions_by_role=None):
    sessions = InMemorySessionStore(ttl_seconds=0)
    identity_store = FakeIdentityStore(identities, permissions_by_role)
    return sessions, identity_store, AuthenticationMiddleware(sessions, identity_store)


def test_missing_session_cookie_is_unauthorized():
    _, identity_store, middleware = _setup()
    handler = Recorder()

    response = middleware.handle(make_context(), handler)

    assert response.status_code == 401
    assert response.body["error"] == {"code": "UNAUTHORIZED", "message": "Authentication required"}
    assert handler.calls == 0
    assert identity_store.lookups == 0


def test_unknown_session_id_is_unauthorized():
    _, _, middleware = _setup()
    handler = Recorder()

    response = middleware.handle(make_context(session_id="no-such-session"), handler)

    assert response.status_code == 401
    assert handler.calls == 0


def test_session_without_user_id_is_unauthorized():
    sessions, _, middleware = _setup()
    session_id = sessions.create({"user": {"email": "ghost@acme.com"}})

    response = middleware.handle(make_context(session_id=session_id), Recorder())

    assert response.status_code == 401
    assert response.body["error"]["message"] == "Authentication required"


def test_inactive_user_destroys_session_with_generic_message():
    sessions, _, middleware = _setup(identities=[])
    session_id = sessions.create({"user": {"id": 5}, "permissions": []})
    handler = Recorder()

    response = middleware.handle(make_context(session_id=session_id), handler)

    assert response.status_code == 401
    assert response.body["error"]["message"] == "Session expired or user inactive"
    assert sessions.get(session_id) is None
    assert handler.calls == 0


def test_active_user_is_loaded_into_context_and_session_refreshed():
    identity = make_identity(user_id=5, company_id=77, role_id=2, role_name="HR", employee_id=50)
    sessions, _, middleware = _setup(
        identities=[identity],
        permissions_by_role={2: ["leave.approve", "employee.view", "employee.view"]},
    )
    # Stale snapshot from login time.
    session_id = sessions.create({"user": {"id": 5, "role_name": "Employee"}, "permissions": []})
    ctx = make_context(session_id=session_id)
    handler = Recorder()

    response = middleware.handle(ctx, handler)

    assert response.status_code == 200
    assert handler.calls == 1
    assert ctx.user == identity
    assert ctx.company_id == 77
    assert ctx.permissions == frozenset({"employee.view", "leave.approve"})

    stored = sessions.get(session_id)
    assert stored["user"]["role_name"] == "HR"
    assert stored["user"]["company_id"] == 77
    assert stored["permissions"] == ["employee.view", "leave.approve"]


def test_user_lookup_happens_on_every_request():
    identity = make_identity(user_id=8)
    sessions, identity_store, middleware = _setup(identities=[identity])
    session_id = sessions.create({"user": {"id": 8}})

    for _ in range(3):
        assert middleware.handle(make_context(session_id=session_id), Recorder()).status_code == 200

    assert identity_store.lookups == 3

    # Deactivation takes effect on the next request.
    identity_store.identities.clear()
    response = middleware.handle(make_context(session_id=session_id), Recorder())
    assert response.status_code == 401
