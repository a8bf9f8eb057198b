# app/services/roles_service.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.models.permission import Permission
from app.models.role import Role
from app.models.user import User

logger = logging.getLogger(__name__)


def list_roles(db: Session) -> List[Role]:
    return (
        db.query(Role)
        .options(selectinload(Role.permissions))
        .order_by(Role.id.asc())
        .all()
    )


def get_role_or_404(db: Session, role_id: int) -> Role:
    r = db.get(Role, role_id)
    if not r:
        raise HTTPException(status_code=404, detail="Role not found")
    return r


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Role).filter(func.lower(Role.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Role.id != exclude_id)
    return db.query(q.exists()).scalar()


def _load_permissions(db: Session, permission_ids: Iterable[int]) -> List[Permission]:
    wanted = {int(x) for x in permission_ids}
    if not wanted:
        return []
    perms = db.query(Permission).filter(Permission.id.in_(wanted)).all()
    found = {p.id for p in perms}
    unknown = sorted(wanted - found)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown permission ids: {unknown}")
    return perms


def create_role(db: Session, name: str, description: Optional[str],
                permission_ids: Iterable[int] = ()) -> Role:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Role name is required")
    if _name_taken(db, name):
        raise HTTPException(status_code=400, detail="Role exists")

    r = Role(name=name, description=description, is_system=False)
    r.permissions = _load_permissions(db, permission_ids)
    db.add(r)
    db.commit()
    db.refresh(r)
    logger.info("Role %s created (id=%s)", r.name, r.id)
    return r


def update_role(db: Session, role_id: int, name: str, description: Optional[str]) -> Role:
    r = get_role_or_404(db, role_id)
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Role name is required")
    if r.is_system and name != r.name:
        raise HTTPException(status_code=400, detail="System roles cannot be renamed")
    if _name_taken(db, name, exclude_id=r.id):
        raise HTTPException(status_code=400, detail="Role exists")

    r.name = name
    r.description = description
    db.commit()
    db.refresh(r)
    return r


def set_role_permissions(db: Session, role_id: int, permission_ids: Iterable[int]) -> Role:
    """Replace the role's whole permission set (not an incremental add/remove)."""
    r = get_role_or_404(db, role_id)
    r.permissions = _load_permissions(db, permission_ids)
    db.commit()
    db.refresh(r)
    logger.info("Role %s permissions replaced (%d granted)", r.id, len(r.permissions))
    return r


def list_role_users(db: Session, role_id: int) -> List[User]:
    r = get_role_or_404(db, role_id)
    return sorted(r.users, key=lambda u: u.id)


def reassign_role_users(db: Session, role_id: int, target_role_id: int) -> int:
    """Move every user of `role_id` to `target_role_id`. Does NOT commit."""
    if role_id == target_role_id:
        raise HTTPException(status_code=400, detail="Target role must be different")
    source = get_role_or_404(db, role_id)
    target = get_role_or_404(db, target_role_id)

    moved = 0
    for u in list(source.users):
        if target not in u.roles:
            u.roles.append(target)
        u.roles.remove(source)
        moved += 1
    return moved


def delete_role(db: Session, role_id: int, reassign_to: Optional[int] = None) -> int:
    r = get_role_or_404(db, role_id)
    if r.is_system:
        raise HTTPException(status_code=400, detail="System roles cannot be deleted")

    moved = 0
    if r.users:
        if reassign_to is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Role has {len(r.users)} user(s); choose a role to reassign them to",
            )
        moved = reassign_role_users(db, role_id, reassign_to)

    r.permissions = []
    db.delete(r)
    db.commit()
    logger.info("Role %s deleted (%d users reassigned)", role_id, moved)
    return moved
