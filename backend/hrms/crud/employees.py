from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.models.employees import Employee
from hrms.models.enums import EmployeeStatusEnum
from hrms.tenancy.scoping import get_tenant_owned_or_404, scoped_query


def create_employee(
    db: Session,
    *,
    company_id: int,
    employee_code: str,
    first_name: str,
    last_name: str,
    user_id: int | None = None,
    department: str | None = None,
    status: EmployeeStatusEnum | str = EmployeeStatusEnum.ACTIVE,
) -> Employee:
    employee = Employee(
        company_id=company_id,
        user_id=user_id,
        employee_code=employee_code,
        first_name=first_name,
        last_name=last_name,
        department=department,
        status=EmployeeStatusEnum(status),
    )
    db.add(employee)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValueError("Employee code already exists for this company.") from exc
    db.refresh(employee)
    return employee


def get_employee(db: Session, company_id: int, employee_id: int) -> Employee:
    return get_tenant_owned_or_404(db, Employee, company_id, employee_id, message="Employee not found")


def get_employee_by_user(db: Session, company_id: int, user_id: int) -> Employee | None:
    return scoped_query(db, Employee, company_id).filter(Employee.user_id == user_id).first()


def list_employees(
    db: Session,
    company_id: int,
    *,
    offset: int = 0,
    limit: int = 20,
    status: EmployeeStatusEnum | str | None = None,
    search: str | None = None,
) -> tuple[list[Employee], int]:
    query = scoped_query(db, Employee, company_id)
    if status:
        query = query.filter(Employee.status == EmployeeStatusEnum(status))
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Employee.first_name.ilike(term),
                Employee.last_name.ilike(term),
                Employee.employee_code.ilike(term),
            )
        )
    total = query.count()
    rows = (
        query.order_by(Employee.last_name.asc(), Employee.first_name.asc(), Employee.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, total
