from typing import Callable

from sqlalchemy.orm import Session

from hrms.core.errors import BadRequest, NotFound
from hrms.crud.employees import get_employee, get_employee_by_user, list_employees
from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse
from hrms.models.enums import EmployeeStatusEnum
from hrms.schemas.employees import EmployeeRead
from hrms.tenancy.scoping import require_company_id


def _serialize(employee) -> dict:
    return EmployeeRead.model_validate(employee).model_dump(mode="json")


def _parse_id(raw) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise BadRequest("Invalid employee id") from None
    if value <= 0:
        raise BadRequest("Invalid employee id")
    return value


def _parse_status(raw) -> EmployeeStatusEnum | None:
    if raw in (None, ""):
        return None
    try:
        return EmployeeStatusEnum(raw)
    except ValueError:
        raise BadRequest(f"Invalid status filter: {raw}") from None


class EmployeeController:
    """Read-only employee endpoints; every query is filtered by the caller's company."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def index(self, ctx: RequestContext) -> ApiResponse:
        company_id = require_company_id(ctx)
        page = ctx.pagination()
        status = _parse_status(ctx.query_param("status"))
        with self._session_factory() as db:
            rows, total = list_employees(
                db,
                company_id,
                offset=page.offset,
                limit=page.per_page,
                status=status,
                search=ctx.query_param("search"),
            )
            data = [_serialize(row) for row in rows]
        return ApiResponse.paginated(data, total, page.page, page.per_page)

    def me(self, ctx: RequestContext) -> ApiResponse:
        company_id = require_company_id(ctx)
        with self._session_factory() as db:
            employee = get_employee_by_user(db, company_id, ctx.user_id())
            if employee is None:
                raise NotFound("No employee profile linked to this account")
            return ApiResponse.success(_serialize(employee))

    def show(self, ctx: RequestContext) -> ApiResponse:
        company_id = require_company_id(ctx)
        employee_id = _parse_id(ctx.param("id"))
        with self._session_factory() as db:
            employee = get_employee(db, company_id, employee_id)
            return ApiResponse.success(_serialize(employee))
