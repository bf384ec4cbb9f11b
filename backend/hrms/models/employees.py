from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from hrms.core.db import Base
from hrms.models.enums import EmployeeStatusEnum
from hrms.models.mixins import CompanyOwnedMixin, TimestampMixin


class Employee(CompanyOwnedMixin, TimestampMixin, Base):
    __tablename__ = "employees"
    __table_args__ = (
        UniqueConstraint("company_id", "employee_code", name="uq_employee_company_code"),
        Index("ix_employees_company_id", "company_id"),
        Index("ix_employees_company_status", "company_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    employee_code = Column(String(20), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    department = Column(String(100), nullable=True)
    status = Column(
        Enum(
            EmployeeStatusEnum,
            name="employee_status_enum",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default=EmployeeStatusEnum.ACTIVE,
    )

    company = relationship("Company", back_populates="employees", lazy="selectin")
    user = relationship("User", back_populates="employee", lazy="selectin")
