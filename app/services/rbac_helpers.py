# app/services/rbac_helpers.py
from __future__ import annotations

from typing import Set

from sqlalchemy.orm import Session
from sqlalchemy import func

from app.core.config import settings
from app.models.role import Role, RolePermission
from app.models.permission import Permission


def _norm(s: str) -> str:
    return (s or "").strip().lower()


def _get_or_create_role(db: Session, name: str, desc: str = "", is_system: bool = False) -> Role:
    role = db.query(Role).filter(func.lower(Role.name) == _norm(name)).first()
    if not role:
        role = Role(name=name.strip(), description=desc or "", is_system=is_system)
        db.add(role)
        db.flush()  # ensures role.id is available
    elif is_system and not role.is_system:
        role.is_system = True
    return role


def ensure_system_roles(db: Session) -> Role:
    """
    Ensures the protected administrator role exists. Does NOT commit.
    """
    return _get_or_create_role(
        db, settings.ADMIN_ROLE_NAME, "Administrador del sistema (todos los permisos)", is_system=True)


def role_permission_ids(db: Session, role_id: int) -> Set[int]:
    return {
        pid
        for (pid, ) in db.query(RolePermission.permission_id).filter(
            RolePermission.role_id == role_id).all()
    }


def ensure_admin_has_all_permissions(db: Session) -> int:
    """
    Ensures the administrator role contains ALL permissions.
    Safe to run multiple times. Does NOT commit. Returns how many links were added.
    """
    admin_role = db.query(Role).filter(
        func.lower(Role.name) == _norm(settings.ADMIN_ROLE_NAME)).first()
    if not admin_role:
        return 0

    all_perm_ids = {pid for (pid, ) in db.query(Permission.id).all()}
    if not all_perm_ids:
        return 0

    existing = role_permission_ids(db, admin_role.id)
    missing = sorted(all_perm_ids - existing)
    if missing:
        db.bulk_save_objects([
            RolePermission(role_id=admin_role.id, permission_id=pid)
            for pid in missing
        ])
        db.flush()
        db.expire(admin_role, ["permissions"])
    return len(missing)
