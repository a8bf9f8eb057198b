import json

from app.clients.api_client import ApiClientError
from app.clients.views import ConfirmedPermission, PermissionView, RoleView


def perm(pid, subject="Patient", action="read"):
    return PermissionView(id=pid, action=action, subject=subject)


def role(rid, permission_ids, name=None):
    return RoleView(
        id=rid,
        name=name or f"Role {rid}",
        permissions=[ConfirmedPermission(perm(pid)) for pid in permission_ids],
    )


class FakeApi:
    """In-memory stand-in for ClinicApiClient."""

    def __init__(self, roles=None, permissions=None):
        self.roles = list(roles or [])
        self.permissions = list(permissions or [])
        self.fail_updates = False
        self.fail_sync = False
        self.update_calls = []
        self.sync_calls = []
        self.telemetry = []
        self.role_fetches = 0
        self.permission_fetches = 0
        self.seen_during_update = None
        self.cache = None

    def fetch_roles(self):
        self.role_fetches += 1
        return list(self.roles)

    def fetch_permissions(self):
        self.permission_fetches += 1
        return list(self.permissions)

    def update_role_permissions(self, role_id, permission_ids):
        self.update_calls.append((role_id, list(permission_ids)))
        if self.cache is not None:
            self.seen_during_update = self.cache.get_query_data(("roles",))
        if self.fail_updates:
            raise ApiClientError(500, "boom")
        updated = role(role_id, permission_ids)
        self.roles = [updated if r.id == role_id else r for r in self.roles]
        return updated

    def sync_permissions(self, force=False):
        self.sync_calls.append(force)
        if self.fail_sync:
            raise ApiClientError(None, "connection refused")
        return {"synced": True, "reason": "Forced sync" if force else "Permissions changed"}

    def send_unmapped_subjects(self, payload):
        self.telemetry.append(payload)
        return {"id": len(self.telemetry)}


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")
        self.content = self.text.encode("utf-8")
        self.reason = "Error" if status_code >= 400 else "OK"

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    """requests.Session stand-in that replays canned responses in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt
