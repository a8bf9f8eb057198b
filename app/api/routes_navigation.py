# FILE: app/api/routes_navigation.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_user
from app.core.rbac import ability_for, ability_for_role, require_perm
from app.models.user import User
from app.navigation.nav_generator import filter_sections_for, get_nav_sections
from app.schemas.matrix import NavSectionOut, nav_sections_out
from app.services import roles_service

router = APIRouter()


@router.get("/sections", response_model=List[NavSectionOut])
def my_nav_sections(
    role_id: Optional[int] = Query(default=None, description="Preview the sidebar as this role"),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    """Sidebar sections the current user (or, with role_id, the given role) may open."""
    if role_id is None:
        return nav_sections_out(filter_sections_for(get_nav_sections(), ability_for(me)))

    require_perm(me, "read", "Role")
    role = roles_service.get_role_or_404(db, role_id)
    return nav_sections_out(filter_sections_for(get_nav_sections(), ability_for_role(role)))
