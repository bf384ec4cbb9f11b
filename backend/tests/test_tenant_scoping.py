import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret")
os.environ.setdefault("SKIP_CREATE_ALL", "1")

from hrms.core.errors import NotFound, ServerError
from hrms.crud.employees import get_employee, list_employees
from hrms.models.employees import Employee
from hrms.models.users import User
from hrms.tenancy.scoping import (
    assert_belongs_to_tenant,
    get_tenant_owned_or_404,
    require_company_id,
    scoped_query,
)
from tests.factories import make_company, make_context, make_employee, make_identity, make_session_factory


@pytest.fixture
def db_session(tmp_path):
    SessionLocal = make_session_factory(tmp_path, "tenant_scoping")
    with SessionLocal() as session:
        yield session


def test_scoped_query_raises_if_model_missing_company_id():
    class Dummy:
        pass

    class FakeSession:
        def query(self, model):
            return self

        def filter(self, *_args, **_kwargs):
            return self

    with pytest.raises(ValueError):
        scoped_query(FakeSession(), Dummy, company_id=1)


def test_only_company_owned_models_can_be_scoped():
    class Lookalike:
        company_id = 1

    with pytest.raises(ValueError, match="Lookalike"):
        scoped_query(object(), Lookalike, company_id=1)

    for model in (Employee, User):
        (foreign_key,) = model.__table__.c.company_id.foreign_keys
        assert foreign_key.target_fullname == "companies.id"
        assert foreign_key.ondelete == "CASCADE"
        assert model.__table__.c.company_id.nullable is False


def test_scoped_query_requires_company_id(db_session):
    with pytest.raises(ServerError):
        scoped_query(db_session, Employee, None)


def test_scoped_query_only_returns_own_company_rows(db_session):
    acme = make_company(db_session, name="Acme")
    umbrella = make_company(db_session, name="Umbrella")
    make_employee(db_session, company=acme, code="A-1")
    make_employee(db_session, company=acme, code="A-2")
    make_employee(db_session, company=umbrella, code="U-1")

    acme_rows = scoped_query(db_session, Employee, acme.id).all()
    umbrella_rows = scoped_query(db_session, Employee, umbrella.id).all()

    assert {row.employee_code for row in acme_rows} == {"A-1", "A-2"}
    assert {row.company_id for row in umbrella_rows} == {umbrella.id}


def test_employee_of_one_company_is_not_found_under_another(db_session):
    acme = make_company(db_session, name="Acme")
    umbrella = make_company(db_session, name="Umbrella")
    employee = make_employee(db_session, company=acme)

    assert get_employee(db_session, acme.id, employee.id).id == employee.id
    with pytest.raises(NotFound) as excinfo:
        get_employee(db_session, umbrella.id, employee.id)
    assert excinfo.value.message == "Employee not found"


def test_get_tenant_owned_or_404_default_message(db_session):
    acme = make_company(db_session)
    with pytest.raises(NotFound) as excinfo:
        get_tenant_owned_or_404(db_session, Employee, acme.id, 999)
    assert excinfo.value.message == "Resource not found"


def test_list_employees_is_scoped_and_filtered(db_session):
    acme = make_company(db_session, name="Acme")
    umbrella = make_company(db_session, name="Umbrella")
    make_employee(db_session, company=acme, code="A-1", first_name="Ada", last_name="Lovelace")
    make_employee(db_session, company=acme, code="A-2", first_name="Alan", last_name="Turing", status="inactive")
    make_employee(db_session, company=umbrella, code="U-1", first_name="Ada", last_name="Wong")

    rows, total = list_employees(db_session, acme.id)
    assert total == 2
    assert [row.last_name for row in rows] == ["Lovelace", "Turing"]

    rows, total = list_employees(db_session, acme.id, search="ada")
    assert total == 1
    assert rows[0].employee_code == "A-1"

    rows, total = list_employees(db_session, acme.id, status="inactive")
    assert [row.employee_code for row in rows] == ["A-2"]

    rows, total = list_employees(db_session, acme.id, offset=1, limit=1)
    assert total == 2
    assert [row.employee_code for row in rows] == ["A-2"]


def test_assert_belongs_to_tenant(db_session):
    acme = make_company(db_session)
    other = make_company(db_session)
    employee = make_employee(db_session, company=acme)

    assert assert_belongs_to_tenant(employee, acme.id) is employee
    with pytest.raises(NotFound):
        assert_belongs_to_tenant(employee, other.id)
    with pytest.raises(NotFound):
        assert_belongs_to_tenant(None, acme.id)
    assert assert_belongs_to_tenant(None, acme.id, not_found_ok=True) is None


def test_require_company_id_reads_context():
    ctx = make_context()
    with pytest.raises(ServerError):
        require_company_id(ctx)

    ctx.authenticate(make_identity(company_id=42), [])
    assert require_company_id(ctx) == 42
