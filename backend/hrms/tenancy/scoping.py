"""
Helpers to ensure database access stays tenant-scoped.
"""

from sqlalchemy.orm import Session

from hrms.core.errors import NotFound, ServerError
from hrms.dispatch.context import RequestContext
from hrms.models.mixins import CompanyOwnedMixin


def _ensure_model_has_company_id(model) -> None:
    if not (isinstance(model, type) and issubclass(model, CompanyOwnedMixin)):
        name = getattr(model, "__name__", str(model))
        raise ValueError(f"{name} does not define company_id and cannot be tenant-scoped.")


def require_company_id(ctx: RequestContext) -> int:
    """
    Return the caller's company id; handlers call this before any query.
    """
    if ctx.company_id is None:
        raise ServerError("Company context not available")
    return ctx.company_id


def scoped_query(db: Session, model, company_id: int):
    """
    Return a query constrained to the given company.

    Example:
        scoped_query(db, Employee, ctx.company_id).all()
    """
    _ensure_model_has_company_id(model)
    if company_id is None:
        raise ServerError("Company context not available")
    return db.query(model).filter(model.company_id == company_id)


def get_tenant_owned_or_404(db: Session, model, company_id: int, object_id, *, message: str = "Resource not found"):
    """
    Fetch by id + company_id or raise NotFound. Records of other companies
    are indistinguishable from missing ones.
    """
    _ensure_model_has_company_id(model)
    resource = scoped_query(db, model, company_id).filter(model.id == object_id).first()
    if not resource:
        raise NotFound(message)
    return resource


def assert_belongs_to_tenant(resource, company_id: int, *, not_found_ok: bool = False):
    """
    Guard that a loaded resource matches the requested company.
    """
    if resource is None:
        if not_found_ok:
            return None
        raise NotFound()

    if getattr(resource, "company_id", None) != company_id:
        raise NotFound()
    return resource
