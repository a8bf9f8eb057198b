from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.permission import PermissionOut


class RoleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = None


class RoleCreate(RoleBase):
    permission_ids: List[int] = []


class RoleUpdate(RoleBase):
    pass


class RolePermissionOut(BaseModel):
    permission_id: int
    permission: PermissionOut


class RoleOut(RoleBase):
    id: int
    is_system: bool = False
    permissions: List[RolePermissionOut] = []

    @classmethod
    def from_role(cls, r) -> "RoleOut":
        perms = sorted(r.permissions, key=lambda p: p.id)
        return cls(
            id=r.id,
            name=r.name,
            description=r.description,
            is_system=bool(r.is_system),
            permissions=[
                RolePermissionOut(permission_id=p.id, permission=PermissionOut.model_validate(p))
                for p in perms
            ],
        )


class RolePermissionsUpdate(BaseModel):
    permission_ids: List[int]


class RoleReassignIn(BaseModel):
    target_role_id: int


class RoleUserOut(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool = True

    class Config:
        from_attributes = True


class UnmappedSubjectsIn(BaseModel):
    subjects: List[str]
    total: Optional[int] = None
    timestamp: Optional[datetime] = None
