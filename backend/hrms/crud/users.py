from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.core.time import utcnow
from hrms.crud.roles import get_permission_names_for_role
from hrms.models.employees import Employee
from hrms.models.enums import UserStatusEnum
from hrms.models.roles import Role
from hrms.models.users import User
from hrms.tenancy.identity import Identity


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(
    db: Session,
    *,
    company_id: int,
    role_id: int,
    email: str,
    password_hash: str,
    status: UserStatusEnum | str = UserStatusEnum.ACTIVE,
) -> User:
    user = User(
        company_id=company_id,
        role_id=role_id,
        email=_normalize_email(email),
        password_hash=password_hash,
        status=UserStatusEnum(status),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValueError("Email already registered.") from exc
    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    # Global lookup: login happens before a company is known.
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def update_last_login(db: Session, user: User) -> None:
    user.last_login = utcnow()
    db.commit()


def set_user_status(db: Session, user: User, status: UserStatusEnum | str) -> User:
    user.status = UserStatusEnum(status)
    db.commit()
    db.refresh(user)
    return user


def find_active_identity(db: Session, user_id: int) -> Optional[Identity]:
    row = (
        db.query(
            User.id,
            User.company_id,
            User.role_id,
            User.email,
            Role.name,
            Employee.id,
        )
        .join(Role, Role.id == User.role_id)
        .outerjoin(Employee, Employee.user_id == User.id)
        .filter(User.id == user_id, User.status == UserStatusEnum.ACTIVE)
        .first()
    )
    if row is None:
        return None
    uid, company_id, role_id, email, role_name, employee_id = row
    return Identity(
        id=int(uid),
        company_id=int(company_id),
        role_id=int(role_id),
        role_name=role_name,
        email=email,
        employee_id=int(employee_id) if employee_id is not None else None,
    )


class SqlIdentityStore:
    """IdentityStore backed by SQLAlchemy; opens one short DB session per lookup."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def find_active_user_by_id(self, user_id: int) -> Optional[Identity]:
        with self._session_factory() as db:
            return find_active_identity(db, user_id)

    def find_permissions_by_role(self, role_id: int) -> list[str]:
        with self._session_factory() as db:
            return get_permission_names_for_role(db, role_id)
