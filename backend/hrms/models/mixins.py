from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import declared_attr

from hrms.core.time import utcnow


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class CompanyOwnedMixin:
    """
    Rows that belong to exactly one company. Only models carrying this mixin
    can go through the tenant scoping helpers.
    """

    @declared_attr
    def company_id(cls):
        return Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
