from typing import Iterable

from sqlalchemy.orm import Session

from hrms.models.roles import Permission, Role, RolePermission
from hrms.tenancy.permissions import PERMISSIONS, ROLE_DESCRIPTIONS, ROLE_PERMISSIONS, module_of


def get_role_by_name(db: Session, name: str) -> Role | None:
    return db.query(Role).filter(Role.name == name).first()


def get_or_create_role(db: Session, name: str, description: str | None = None) -> Role:
    role = get_role_by_name(db, name)
    if role:
        return role
    role = Role(name=name, description=description)
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def get_or_create_permission(db: Session, name: str, description: str | None = None) -> Permission:
    permission = db.query(Permission).filter(Permission.name == name).first()
    if permission:
        return permission
    permission = Permission(name=name, module=module_of(name), description=description)
    db.add(permission)
    db.commit()
    db.refresh(permission)
    return permission


def grant_permissions(db: Session, role: Role, permission_names: Iterable[str]) -> int:
    """Attach permissions to a role, skipping pairs that already exist."""
    existing = {
        row.permission_id
        for row in db.query(RolePermission).filter(RolePermission.role_id == role.id).all()
    }
    granted = 0
    for name in permission_names:
        permission = get_or_create_permission(db, name, PERMISSIONS.get(name))
        if permission.id in existing:
            continue
        db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        existing.add(permission.id)
        granted += 1
    db.commit()
    return granted


def revoke_permission(db: Session, role: Role, permission_name: str) -> bool:
    permission = db.query(Permission).filter(Permission.name == permission_name).first()
    if permission is None:
        return False
    deleted = (
        db.query(RolePermission)
        .filter(RolePermission.role_id == role.id, RolePermission.permission_id == permission.id)
        .delete()
    )
    db.commit()
    return deleted > 0


def get_permission_names_for_role(db: Session, role_id: int) -> list[str]:
    rows = (
        db.query(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .order_by(Permission.name.asc())
        .all()
    )
    return [name for (name,) in rows]


def seed_roles_and_permissions(db: Session) -> dict[str, Role]:
    for name, description in PERMISSIONS.items():
        get_or_create_permission(db, name, description)
    roles = {}
    for role_name, permission_names in ROLE_PERMISSIONS.items():
        role = get_or_create_role(db, role_name, ROLE_DESCRIPTIONS.get(role_name))
        grant_permissions(db, role, permission_names)
        roles[role_name] = role
    return roles
