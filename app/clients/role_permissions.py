# app/clients/role_permissions.py
"""
Role permission toggles with optimistic cache writes.

The roles list in the query cache is rewritten before the server answers,
restored from a snapshot when the update fails, and refetched once the
mutation settles either way.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional

from app.clients.api_client import ApiClientError, ClinicApiClient
from app.clients.query_cache import QueryCache
from app.clients.views import (
    PendingPermission,
    RolePermissionEntry,
    RoleView,
)

logger = logging.getLogger(__name__)

ROLES_KEY = ("roles",)
PERMISSIONS_KEY = ("permissions",)

MSG_UPDATE_ERROR = "Error al actualizar permisos"
MSG_SYNC_SUCCESS = "Permisos sincronizados con el sistema"
MSG_SYNC_ERROR = "Error al sincronizar permisos"

# notify(kind, message), kind is "success" or "error"
Notifier = Callable[[str, str], None]


def log_notifier(kind: str, message: str) -> None:
    if kind == "error":
        logger.error(message)
    else:
        logger.info(message)


def compute_single_toggle(current_ids: Iterable[int], permission_id: int) -> List[int]:
    ids = list(dict.fromkeys(current_ids))
    if permission_id in ids:
        return [i for i in ids if i != permission_id]
    return ids + [permission_id]


def compute_bulk_toggle(current_ids: Iterable[int], permission_ids: Iterable[int]) -> List[int]:
    """All of the group granted -> revoke the group; otherwise grant what's missing."""
    ids = list(dict.fromkeys(current_ids))
    group = list(dict.fromkeys(permission_ids))
    present = set(ids)
    if group and all(pid in present for pid in group):
        drop = set(group)
        return [i for i in ids if i not in drop]
    return ids + [pid for pid in group if pid not in present]


def optimistic_update_role(roles: Optional[List[RoleView]], role_id: int,
                           permission_ids: Iterable[int]) -> Optional[List[RoleView]]:
    """
    New roles list with `role_id`'s permissions replaced. Entries that were
    already confirmed stay confirmed; new ids become PendingPermission.
    """
    if roles is None:
        return None

    out: List[RoleView] = []
    for role in roles:
        if role.id != role_id:
            out.append(role)
            continue
        known: Dict[int, RolePermissionEntry] = {e.permission_id: e for e in role.permissions}
        entries = [known.get(pid) or PendingPermission(pid) for pid in permission_ids]
        out.append(replace(role, permissions=entries))
    return out


class RolePermissionReconciler:
    def __init__(self, api: ClinicApiClient, cache: QueryCache,
                 notify: Optional[Notifier] = None) -> None:
        self.api = api
        self.cache = cache
        self.notify = notify or log_notifier
        self.updating_role_id: Optional[int] = None

    def update_permissions(self, role_id: int, permission_ids: Iterable[int]) -> bool:
        """
        Replace the role's permission set. Returns False when the server
        rejected it (cache rolled back, error notified); never raises on
        API errors and never retries.
        """
        ids = list(permission_ids)

        self.cache.cancel_queries(ROLES_KEY)
        previous = self.cache.get_query_data(ROLES_KEY)
        self.cache.set_query_data(ROLES_KEY, lambda old: optimistic_update_role(old, role_id, ids))
        self.updating_role_id = role_id

        try:
            self.api.update_role_permissions(role_id, ids)
            return True
        except ApiClientError as e:
            logger.error("Error updating permissions for role %s: %s", role_id, e)
            self.cache.set_query_data(ROLES_KEY, previous)
            self.notify("error", MSG_UPDATE_ERROR)
            return False
        finally:
            self.updating_role_id = None
            self.cache.invalidate_queries(ROLES_KEY)

    def toggle_single_permission(self, role: RoleView, permission_id: int) -> bool:
        return self.update_permissions(
            role.id, compute_single_toggle(role.permission_ids, permission_id))

    def toggle_bulk(self, role: RoleView, permission_ids: Iterable[int]) -> bool:
        return self.update_permissions(
            role.id, compute_bulk_toggle(role.permission_ids, permission_ids))

    def sync_permissions(self, force: bool = False) -> bool:
        try:
            result = self.api.sync_permissions(force=force)
        except ApiClientError as e:
            logger.error("Error syncing permissions: %s", e)
            self.notify("error", MSG_SYNC_ERROR)
            return False

        logger.info("Permission sync: %s", (result or {}).get("reason"))
        self.notify("success", MSG_SYNC_SUCCESS)
        self.cache.invalidate_queries(PERMISSIONS_KEY)
        return True
