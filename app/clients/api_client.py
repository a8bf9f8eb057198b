# app/clients/api_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings
from app.clients.views import PermissionView, RoleView

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Non-2xx or unparseable answer (status_code set), or no usable answer (status_code None)."""

    def __init__(self, status_code: Optional[int], msg: str, details: Any = None) -> None:
        super().__init__(msg)
        self.status_code = status_code
        self.msg = msg
        self.details = details

    def __str__(self) -> str:
        if self.status_code is None:
            return self.msg
        return f"{self.status_code}: {self.msg}"


def _error_from_response(r: requests.Response) -> ApiClientError:
    try:
        body = r.json()
    except ValueError:
        return ApiClientError(r.status_code, r.text or r.reason or "Request failed")

    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            return ApiClientError(r.status_code, err.get("msg") or "Request failed",
                                  err.get("details"))
        if body.get("detail") is not None:
            return ApiClientError(r.status_code, str(body["detail"]))
    return ApiClientError(r.status_code, "Request failed", body)


class ClinicApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        root = (base_url or settings.API_BASE_URL).rstrip("/")
        self.base_url = f"{root}{settings.API_V1_STR}"
        self.token = token
        self.timeout = timeout if timeout is not None else settings.API_CLIENT_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, headers=self._headers(),
                                     timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiClientError(None, str(e)) from e

        if not r.ok:
            raise _error_from_response(r)
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            logger.warning("%s %s returned a non-JSON body", method, url)
            raise ApiClientError(r.status_code, "Invalid JSON response") from e

    # ---------------------------
    # Auth
    # ---------------------------
    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    # ---------------------------
    # Permissions / roles
    # ---------------------------
    def fetch_permissions(self) -> List[PermissionView]:
        return [PermissionView.from_json(d) for d in self._request("GET", "/permissions/") or []]

    def fetch_roles(self) -> List[RoleView]:
        return [RoleView.from_json(d) for d in self._request("GET", "/roles/") or []]

    def update_role_permissions(self, role_id: int, permission_ids: List[int]) -> RoleView:
        data = self._request("PUT", f"/roles/{role_id}/permissions",
                             json={"permission_ids": list(permission_ids)})
        if not isinstance(data, dict):
            raise ApiClientError(None, "Empty role in update response")
        try:
            return RoleView.from_json(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ApiClientError(None, "Malformed role in update response", data) from e

    def sync_permissions(self, force: bool = False) -> Dict[str, Any]:
        return self._request("POST", "/permissions/sync", params={"force": str(force).lower()})

    def send_unmapped_subjects(self, payload: Dict[str, Any]) -> Any:
        return self._request("POST", "/roles/telemetry/unmapped-subjects", json=payload)
