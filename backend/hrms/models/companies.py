from sqlalchemy import Column, Enum, Integer, String
from sqlalchemy.orm import relationship

from hrms.core.db import Base
from hrms.models.enums import CompanyStatusEnum
from hrms.models.mixins import TimestampMixin


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    status = Column(
        Enum(
            CompanyStatusEnum,
            name="company_status_enum",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default=CompanyStatusEnum.ACTIVE,
    )

    users = relationship("User", back_populates="company", lazy="selectin")
    employees = relationship("Employee", back_populates="company", lazy="selectin")
