from sqlalchemy.orm import Session

from hrms.models.companies import Company
from hrms.models.enums import CompanyStatusEnum


def create_company(
    db: Session,
    name: str,
    status: CompanyStatusEnum | str = CompanyStatusEnum.ACTIVE,
) -> Company:
    company = Company(name=name.strip(), status=CompanyStatusEnum(status))
    db.add(company)
    db.commit()
    db.refresh(company)
    return company
