# app/clients/permission_catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Set

from app.clients.api_client import ApiClientError, ClinicApiClient
from app.clients.query_cache import QueryCache
from app.clients.role_permissions import PERMISSIONS_KEY, ROLES_KEY
from app.clients.views import PermissionView, RoleView
from app.navigation.route_data import ROUTE_DATA
from app.services.permission_matrix import PermissionMatrix, build_permission_matrix
from app.services.subject_mapping import AliasScoring

logger = logging.getLogger(__name__)


@dataclass
class CatalogSnapshot:
    permissions: List[PermissionView]
    roles: List[RoleView]


class PermissionCatalogLoader:
    """Fetches permissions + roles through the cache and derives the matrix."""

    def __init__(self, api: ClinicApiClient, cache: Optional[QueryCache] = None,
                 scoring: Optional[AliasScoring] = None) -> None:
        self.api = api
        self.cache = cache or QueryCache()
        self.scoring = scoring
        self._reported: Set[str] = set()

    def load(self) -> CatalogSnapshot:
        permissions = self.cache.fetch_query(PERMISSIONS_KEY, self.api.fetch_permissions)
        roles = self.cache.fetch_query(ROLES_KEY, self.api.fetch_roles)
        return CatalogSnapshot(permissions=list(permissions or []), roles=list(roles or []))

    def build_matrix(self, route_tree: Any = None) -> PermissionMatrix:
        snapshot = self.load()
        tree = ROUTE_DATA if route_tree is None else route_tree
        matrix = build_permission_matrix(tree, snapshot.permissions, scoring=self.scoring)
        if matrix.unmapped_subjects:
            self.report_unmapped_subjects(matrix.unmapped_subjects)
        return matrix

    def report_unmapped_subjects(self, subjects: List[str]) -> bool:
        """
        Best-effort beacon, sent once per distinct subject list for this
        loader. Returns whether a report was attempted.
        """
        key = ",".join(sorted(subjects))
        if not key or key in self._reported:
            return False
        self._reported.add(key)

        logger.warning("Permission subjects without a nav location: %s", ", ".join(subjects))
        payload = {
            "subjects": list(subjects),
            "total": len(subjects),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.api.send_unmapped_subjects(payload)
        except ApiClientError as e:
            logger.debug("Unmapped subjects report not delivered: %s", e)
        return True
