from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.permission import Permission
from app.models.role import Role
from app.models.user import User
from app.utils.jwt import create_access_refresh


def get_or_create_permission(db: Session, action: str, subject: str) -> Permission:
    p = db.query(Permission).filter_by(action=action, subject=subject).first()
    if not p:
        p = Permission(action=action, subject=subject, description=f"{action} {subject}")
        db.add(p)
        db.flush()
    return p


def make_user(db: Session, email: str, perms: Iterable[Tuple[str, str]] = (),
              is_admin: bool = False, role_name: Optional[str] = None,
              password_hash: str = "x") -> User:
    user = User(name=email.split("@")[0], email=email, password_hash=password_hash,
                is_active=True, is_admin=is_admin)
    perms = list(perms)
    if perms or role_name:
        role = Role(name=role_name or f"role-{email}", description="test role")
        role.permissions = [get_or_create_permission(db, a, s) for a, s in perms]
        user.roles.append(role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(email: str) -> dict:
    access, _refresh = create_access_refresh(email)
    return {"Authorization": f"Bearer {access}"}
