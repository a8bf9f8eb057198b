# app/services/permission_sync.py
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.permission import Permission
from app.models.setting import Setting
from app.navigation.route_data import API_PERMISSIONS, CRUD_ACTIONS, ROUTE_DATA
from app.navigation.route_tree import as_roots, route_children, route_permission
from app.services.rbac_helpers import ensure_admin_has_all_permissions, ensure_system_roles

logger = logging.getLogger(__name__)

PERMISSIONS_HASH_KEY = "permissions_sync_hash"


@dataclass
class SyncResult:
    synced: bool
    reason: str
    created: int = 0
    deleted: int = 0


def collect_route_subjects(route_tree: Any = None) -> Set[str]:
    tree = ROUTE_DATA if route_tree is None else route_tree
    subjects: Set[str] = set()

    def walk(node: Any) -> None:
        perm = route_permission(node)
        if perm:
            subjects.add(perm["subject"])
        for child in route_children(node):
            walk(child)

    for root in as_roots(tree):
        walk(root)
    return subjects


def expected_permissions(route_tree: Any = None,
                         api_permissions: Optional[Iterable[Dict[str, str]]] = None
                         ) -> List[Tuple[str, str, str]]:
    """(action, subject, description) rows the catalog must contain."""
    api = list(API_PERMISSIONS if api_permissions is None else api_permissions)
    rows: List[Tuple[str, str, str]] = []
    for subject in sorted(collect_route_subjects(route_tree)):
        for action in CRUD_ACTIONS:
            rows.append((action, subject, f"Auto-generated {action} for {subject}"))
    for p in api:
        rows.append((p["action"], p["subject"], "API-only permission"))
    return rows


def generate_permissions_hash(route_tree: Any = None,
                              api_permissions: Optional[Iterable[Dict[str, str]]] = None) -> str:
    api = list(API_PERMISSIONS if api_permissions is None else api_permissions)
    route_keys = [
        f"{action}:{subject}"
        for subject in sorted(collect_route_subjects(route_tree))
        for action in CRUD_ACTIONS
    ]
    api_keys = sorted(f"{p['action']}:{p['subject']}" for p in api)
    return hashlib.md5("|".join(route_keys + api_keys).encode("utf-8")).hexdigest()


def _stored_hash(db: Session) -> Optional[str]:
    row = db.query(Setting).filter(Setting.key == PERMISSIONS_HASH_KEY).first()
    return row.value if row else None


def _store_hash(db: Session, value: str) -> None:
    row = db.query(Setting).filter(Setting.key == PERMISSIONS_HASH_KEY).first()
    if row:
        row.value = value
    else:
        db.add(Setting(key=PERMISSIONS_HASH_KEY, value=value))


def sync_permissions(db: Session, force: bool = False, route_tree: Any = None,
                     api_permissions: Optional[Iterable[Dict[str, str]]] = None) -> SyncResult:
    """
    Make the permissions table match the declared routes + API permissions.

    Skipped when the stored hash matches (unless forced). Each step commits on
    its own; a failing step is logged and rolled back and later steps still run.
    """
    current_hash = generate_permissions_hash(route_tree, api_permissions)

    if not force:
        try:
            if _stored_hash(db) == current_hash:
                return SyncResult(synced=False, reason="Permissions unchanged (hash match)")
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Could not read permissions hash, syncing anyway: %s", e)

    expected = expected_permissions(route_tree, api_permissions)
    valid = {(a, s) for (a, s, _d) in expected}
    created = 0
    deleted = 0

    # 1. upsert by (action, subject)
    try:
        existing = {(p.action, p.subject) for p in db.query(Permission).all()}
        for action, subject, description in expected:
            if (action, subject) in existing:
                continue
            db.add(Permission(action=action, subject=subject, description=description))
            existing.add((action, subject))
            created += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        created = 0
        logger.exception("Error creating permissions")

    # 2. drop obsolete rows (role links go with them)
    try:
        obsolete = [p for p in db.query(Permission).all() if (p.action, p.subject) not in valid]
        if obsolete:
            logger.info("Cleaning up %d obsolete permissions", len(obsolete))
        for p in obsolete:
            p.roles = []
            db.delete(p)
            deleted += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        deleted = 0
        logger.exception("Error cleaning up permissions")

    # 3. admin role gets everything
    try:
        ensure_system_roles(db)
        granted = ensure_admin_has_all_permissions(db)
        db.commit()
        if granted:
            logger.info("Auto-assigned %d permissions to %s", granted, settings.ADMIN_ROLE_NAME)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error auto-assigning permissions to admin")

    # 4. remember what we synced
    try:
        _store_hash(db, current_hash)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error storing permissions hash")

    reason = "Forced sync" if force else "Permissions changed (hash mismatch)"
    logger.info("Permissions synced (%s): %d created, %d deleted", reason, created, deleted)
    return SyncResult(synced=True, reason=reason, created=created, deleted=deleted)
