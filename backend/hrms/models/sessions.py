from sqlalchemy import JSON, Column, DateTime, String

from hrms.core.db import Base
from hrms.core.time import utcnow


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
