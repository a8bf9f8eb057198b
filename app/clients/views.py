# app/clients/views.py
"""Client-side shapes of the permissions / roles payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class PermissionView:
    id: int
    action: str
    subject: str
    description: Optional[str] = None

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "PermissionView":
        return cls(
            id=int(d["id"]),
            action=d.get("action") or "",
            subject=d.get("subject") or "",
            description=d.get("description"),
        )


@dataclass(frozen=True)
class ConfirmedPermission:
    permission: PermissionView

    @property
    def permission_id(self) -> int:
        return self.permission.id

    @property
    def is_pending(self) -> bool:
        return False


@dataclass(frozen=True)
class PendingPermission:
    """Optimistically granted; details arrive with the next roles refetch."""
    permission_id: int

    @property
    def is_pending(self) -> bool:
        return True


RolePermissionEntry = Union[ConfirmedPermission, PendingPermission]


@dataclass(frozen=True)
class RoleView:
    id: int
    name: str
    description: Optional[str] = None
    is_system: bool = False
    permissions: List[RolePermissionEntry] = field(default_factory=list)

    @property
    def permission_ids(self) -> List[int]:
        return [e.permission_id for e in self.permissions]

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "RoleView":
        entries: List[RolePermissionEntry] = []
        for rp in d.get("permissions") or []:
            perm = rp.get("permission")
            if perm:
                entries.append(ConfirmedPermission(PermissionView.from_json(perm)))
            else:
                entries.append(PendingPermission(int(rp["permission_id"])))
        return cls(
            id=int(d["id"]),
            name=d.get("name") or "",
            description=d.get("description"),
            is_system=bool(d.get("is_system")),
            permissions=entries,
        )
