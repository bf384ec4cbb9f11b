from .companies import Company
from .roles import Permission, Role, RolePermission
from .users import User
from .employees import Employee
from .sessions import UserSession

__all__ = [
    "Company",
    "Employee",
    "Permission",
    "Role",
    "RolePermission",
    "User",
    "UserSession",
]
