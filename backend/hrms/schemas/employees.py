from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from hrms.models.enums import EmployeeStatusEnum


class EmployeeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: Optional[int] = None
    employee_code: str
    first_name: str
    last_name: str
    department: Optional[str] = None
    status: EmployeeStatusEnum
    created_at: datetime
    updated_at: datetime
