# app/models/__init__.py
from .user import User, UserRole
from .role import Role, RolePermission
from .permission import Permission
from .setting import Setting
from .telemetry import UnmappedSubjectReport

__all__ = [
    "User",
    "UserRole",
    "Role",
    "RolePermission",
    "Permission",
    "Setting",
    "UnmappedSubjectReport",
]
