from sqlalchemy.orm import Session

from hrms.core.security import get_password_hash
from hrms.crud.employees import create_employee
from hrms.crud.users import create_user, get_user_by_email
from hrms.models.companies import Company
from hrms.models.employees import Employee
from hrms.models.roles import Role
from hrms.models.users import User


def get_or_create_company(db: Session, name: str) -> Company:
    company = db.query(Company).filter(Company.name == name).first()
    if company:
        return company
    company = Company(name=name)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def get_or_create_user(
    db: Session,
    company: Company,
    role: Role,
    email: str,
    password: str,
) -> User:
    user = get_user_by_email(db, email)
    if user:
        return user
    return create_user(
        db,
        company_id=company.id,
        role_id=role.id,
        email=email,
        password_hash=get_password_hash(password),
    )


def get_or_create_employee(
    db: Session,
    company: Company,
    employee_code: str,
    first_name: str,
    last_name: str,
    *,
    user: User | None = None,
    department: str | None = None,
) -> Employee:
    employee = (
        db.query(Employee)
        .filter(Employee.company_id == company.id, Employee.employee_code == employee_code)
        .first()
    )
    if employee:
        return employee
    return create_employee(
        db,
        company_id=company.id,
        user_id=user.id if user else None,
        employee_code=employee_code,
        first_name=first_name,
        last_name=last_name,
        department=department,
    )
