# FILE: app/api/routes_roles.py
from __future__ import annotations

import io
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_user
from app.core.rbac import require_perm
from app.models.permission import Permission
from app.models.user import User
from app.navigation.route_data import ROUTE_DATA
from app.schemas.matrix import PermissionMatrixOut
from app.schemas.role import (
    RoleCreate,
    RoleOut,
    RolePermissionsUpdate,
    RoleReassignIn,
    RoleUpdate,
    RoleUserOut,
    UnmappedSubjectsIn,
)
from app.services import roles_service
from app.services.excel_export import build_permission_matrix_excel
from app.services.permission_matrix import build_permission_matrix
from app.services.subject_mapping import alias_scoring_from_settings
from app.services.telemetry_service import record_unmapped_subjects

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _current_matrix(db: Session):
    catalog = db.query(Permission).order_by(Permission.subject.asc(), Permission.action.asc()).all()
    return build_permission_matrix(ROUTE_DATA, catalog, scoring=alias_scoring_from_settings())


@router.get("/", response_model=List[RoleOut])
def list_roles(db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "read", "Role")
    return [RoleOut.from_role(r) for r in roles_service.list_roles(db)]


@router.get("/matrix", response_model=PermissionMatrixOut)
def permission_matrix(db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "read", "Role")
    return PermissionMatrixOut.from_matrix(_current_matrix(db))


@router.get("/matrix/export")
def export_permission_matrix(db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "read", "Role")
    matrix = _current_matrix(db)
    roles = roles_service.list_roles(db)

    buf = io.BytesIO()
    build_permission_matrix_excel(buf, matrix, roles)
    buf.seek(0)
    logger.info("Permission matrix exported by user %s (%d roles)", me.id, len(roles))
    return StreamingResponse(
        buf,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="roles_permisos.xlsx"'},
    )


@router.post("/telemetry/unmapped-subjects")
def report_unmapped_subjects(
    payload: UnmappedSubjectsIn,
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    row = record_unmapped_subjects(
        db,
        payload.subjects,
        total=payload.total,
        reported_at=payload.timestamp,
        reported_by_id=me.id,
    )
    return {"id": row.id, "total": row.total}


@router.post("/", response_model=RoleOut, status_code=201)
def create_role(payload: RoleCreate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "create", "Role")
    r = roles_service.create_role(db, payload.name, payload.description, payload.permission_ids)
    return RoleOut.from_role(r)


@router.put("/{role_id}", response_model=RoleOut)
def update_role(role_id: int, payload: RoleUpdate, db: Session = Depends(get_db),
                me: User = Depends(current_user)):
    require_perm(me, "update", "Role")
    r = roles_service.update_role(db, role_id, payload.name, payload.description)
    return RoleOut.from_role(r)


@router.put("/{role_id}/permissions", response_model=RoleOut)
def update_role_permissions(role_id: int, payload: RolePermissionsUpdate,
                            db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "update", "Permission")
    r = roles_service.set_role_permissions(db, role_id, payload.permission_ids)
    return RoleOut.from_role(r)


@router.get("/{role_id}/users", response_model=List[RoleUserOut])
def list_role_users(role_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "read", "Role")
    return roles_service.list_role_users(db, role_id)


@router.post("/{role_id}/reassign")
def reassign_role_users(role_id: int, payload: RoleReassignIn, db: Session = Depends(get_db),
                        me: User = Depends(current_user)):
    require_perm(me, "update", "Role")
    moved = roles_service.reassign_role_users(db, role_id, payload.target_role_id)
    db.commit()
    return {"message": "Reassigned", "moved": moved}


@router.delete("/{role_id}")
def delete_role(role_id: int, reassign_to: Optional[int] = Query(default=None),
                db: Session = Depends(get_db), me: User = Depends(current_user)):
    require_perm(me, "delete", "Role")
    moved = roles_service.delete_role(db, role_id, reassign_to=reassign_to)
    return {"message": "Deleted", "moved": moved}
