from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from hrms.core.db import Base
from hrms.models.enums import UserStatusEnum
from hrms.models.mixins import CompanyOwnedMixin, TimestampMixin


class User(CompanyOwnedMixin, TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_company_id", "company_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False)
    # Emails are globally unique: login happens before any tenant is known.
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    status = Column(
        Enum(
            UserStatusEnum,
            name="user_status_enum",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default=UserStatusEnum.ACTIVE,
    )
    last_login = Column(DateTime, nullable=True)

    company = relationship("Company", back_populates="users", lazy="selectin")
    role = relationship("Role", lazy="selectin")
    employee = relationship(
        "Employee",
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )
