from __future__ import annotations

from typing import Any, Callable, Set

from fastapi import HTTPException, status

MANAGE = "manage"  # action that implies every other action on a subject


def perm_key(action: str, subject: str) -> str:
    return f"{(action or '').strip().lower()}:{(subject or '').strip().lower()}"


def is_admin_user(user: Any) -> bool:
    """
    Admin bypass: is_admin flag on the user.
    """
    if not user:
        return False
    return bool(getattr(user, "is_admin", False))


def iter_user_perm_keys(user: Any) -> Set[str]:
    """
    Collect "action:subject" keys (lowercased) from user.roles[*].permissions.
    Works even if some attributes are missing.
    """
    out: Set[str] = set()
    if not user:
        return out

    for r in getattr(user, "roles", None) or []:
        out |= iter_role_perm_keys(r)
    return out


def iter_role_perm_keys(role: Any) -> Set[str]:
    out: Set[str] = set()
    for p in getattr(role, "permissions", None) or []:
        action = getattr(p, "action", None)
        subject = getattr(p, "subject", None)
        if action and subject:
            out.add(perm_key(action, subject))
    return out


def has_perm(user: Any, action: str, subject: str) -> bool:
    if is_admin_user(user):
        return True
    keys = iter_user_perm_keys(user)
    return perm_key(action, subject) in keys or perm_key(MANAGE, subject) in keys


def require_perm(user: Any, action: str, subject: str) -> None:
    if not has_perm(user, action, subject):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Forbidden: missing {action}:{subject}",
        )


def ability_for(user: Any) -> Callable[[str, str], bool]:
    """can(action, subject) closure with the user's keys computed once."""
    if is_admin_user(user):
        return lambda action, subject: True
    keys = iter_user_perm_keys(user)
    return _can(keys)


def ability_for_role(role: Any) -> Callable[[str, str], bool]:
    """Abilities of someone holding only `role` (no admin bypass), for "view as role"."""
    return _can(iter_role_perm_keys(role))


def _can(keys: Set[str]) -> Callable[[str, str], bool]:
    return lambda action, subject: (
        perm_key(action, subject) in keys or perm_key(MANAGE, subject) in keys)
