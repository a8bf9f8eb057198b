# FILE: app/api/routes_permissions.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_user
from app.core.rbac import require_perm
from app.models.permission import Permission
from app.models.user import User
from app.schemas.permission import PermissionOut, SyncResultOut
from app.services.permission_sync import sync_permissions

router = APIRouter()


@router.get("/", response_model=List[PermissionOut])
def list_permissions(
    q: Optional[str] = Query(default=None, description="Search in action/subject/description"),
    subject: Optional[str] = Query(default=None, description="Filter by subject"),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    require_perm(user, "read", "Permission")

    qry = db.query(Permission)

    if subject:
        qry = qry.filter(Permission.subject == subject)

    if q:
        s = f"%{q.strip()}%"
        qry = qry.filter(
            or_(
                Permission.action.ilike(s),
                Permission.subject.ilike(s),
                Permission.description.ilike(s),
            )
        )

    return qry.order_by(Permission.subject.asc(), Permission.action.asc()).all()


@router.post("/sync", response_model=SyncResultOut)
def sync_permission_catalog(
    force: bool = Query(default=False),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    require_perm(user, "update", "Permission")
    result = sync_permissions(db, force=force)
    return SyncResultOut(
        synced=result.synced,
        reason=result.reason,
        created=result.created,
        deleted=result.deleted,
    )
