from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        if value is None or not value.strip():
            raise ValueError("Email is required")
        try:
            _, normalized = validate_email(value.strip())
        except PydanticCustomError as exc:
            raise ValueError("Invalid email format") from exc
        return normalized

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        if not value:
            raise ValueError("Password is required")
        return value


class SessionUser(BaseModel):
    id: int
    company_id: int
    role_id: int
    role_name: str
    email: str
    employee_id: Optional[int] = None


class CurrentUser(SessionUser):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    employee_code: Optional[str] = None
    last_login: Optional[datetime] = None
