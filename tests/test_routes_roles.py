import io

from openpyxl import load_workbook

from app.core.config import settings
from app.core.security import hash_password
from app.models.permission import Permission
from app.models.role import Role
from app.models.telemetry import UnmappedSubjectReport
from app.models.user import User
from app.services.permission_sync import sync_permissions

from helpers import auth_headers, get_or_create_permission, make_user


def admin(db):
    make_user(db, "admin@clinic.test", is_admin=True)
    return auth_headers("admin@clinic.test")


def error_of(resp):
    body = resp.json()
    assert body["ok"] is False
    return body["error"]


# ---------------------------------------------------------------------------
# auth / guards
# ---------------------------------------------------------------------------

def test_health(client):
    assert client.get("/").status_code == 200


def test_missing_token_is_401(client):
    r = client.get("/api/roles/")
    assert r.status_code == 401
    assert error_of(r) == {"msg": "Missing token", "code": "unauthorized", "details": None}


def test_missing_permission_is_403(client, db):
    make_user(db, "nurse@clinic.test", perms=[("read", "Patient")])
    r = client.get("/api/permissions/", headers=auth_headers("nurse@clinic.test"))
    assert r.status_code == 403
    err = error_of(r)
    assert err["code"] == "forbidden"
    assert err["msg"] == "Forbidden: missing read:Permission"


def test_manage_implies_every_action(client, db):
    make_user(db, "lead@clinic.test", perms=[("manage", "Permission")])
    r = client.get("/api/permissions/", headers=auth_headers("lead@clinic.test"))
    assert r.status_code == 200


def test_login_and_me(client, db):
    make_user(db, "ana@clinic.test", perms=[("read", "Role")], role_name="Recepción",
              password_hash=hash_password("secret"))

    bad = client.post("/api/auth/login", json={"email": "ana@clinic.test", "password": "nope"})
    assert bad.status_code == 401

    r = client.post("/api/auth/login", json={"email": "ANA@clinic.test ", "password": "secret"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "ana@clinic.test"
    assert me["roles"] == ["Recepción"]
    assert me["permissions"] == ["read:role"]


def test_refresh_issues_new_access_token(client, db):
    make_user(db, "ana@clinic.test", perms=[("read", "Role")], password_hash=hash_password("secret"))
    tokens = client.post("/api/auth/login", json={"email": "ana@clinic.test", "password": "secret"}).json()

    # refresh tokens do not authenticate regular requests
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401

    wrong = client.post("/api/auth/refresh",
                        headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert wrong.status_code == 401
    assert error_of(wrong)["msg"] == "Invalid refresh token"

    r = client.post("/api/auth/refresh",
                    headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 200
    access = r.json()["access_token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.json()["email"] == "ana@clinic.test"


def test_refresh_without_token_is_401(client):
    r = client.post("/api/auth/refresh")
    assert r.status_code == 401
    assert error_of(r)["msg"] == "Missing refresh token"


def test_validation_errors_use_envelope(client, db):
    r = client.post("/api/roles/", json={"description": "no name"}, headers=admin(db))
    assert r.status_code == 422
    err = error_of(r)
    assert err["code"] == "validation_error"
    assert err["details"][0]["loc"][-1] == "name"


# ---------------------------------------------------------------------------
# permissions
# ---------------------------------------------------------------------------

def test_permissions_are_listed_by_subject_then_action(client, db):
    headers = admin(db)
    for a, s in [("update", "Role"), ("read", "Backup"), ("read", "Role")]:
        get_or_create_permission(db, a, s)
    db.commit()

    rows = client.get("/api/permissions/", headers=headers).json()
    assert [(p["subject"], p["action"]) for p in rows] == [
        ("Backup", "read"), ("Role", "read"), ("Role", "update")]

    filtered = client.get("/api/permissions/", params={"subject": "Role"}, headers=headers).json()
    assert {p["subject"] for p in filtered} == {"Role"}


def test_sync_endpoint(client, db):
    headers = admin(db)
    first = client.post("/api/permissions/sync", headers=headers).json()
    assert first["synced"] is True and first["created"] > 0

    second = client.post("/api/permissions/sync", headers=headers).json()
    assert second["synced"] is False

    forced = client.post("/api/permissions/sync", params={"force": True}, headers=headers).json()
    assert forced == {"synced": True, "reason": "Forced sync", "created": 0, "deleted": 0}


# ---------------------------------------------------------------------------
# roles
# ---------------------------------------------------------------------------

def test_create_update_and_replace_permissions(client, db):
    headers = admin(db)
    p1 = get_or_create_permission(db, "read", "Patient")
    p2 = get_or_create_permission(db, "create", "Patient")
    p3 = get_or_create_permission(db, "read", "Budget")
    db.commit()

    r = client.post("/api/roles/", json={"name": "Recepción", "permission_ids": [p2.id, p1.id]},
                    headers=headers)
    assert r.status_code == 201
    role = r.json()
    assert [rp["permission_id"] for rp in role["permissions"]] == sorted([p1.id, p2.id])

    dup = client.post("/api/roles/", json={"name": "recepción"}, headers=headers)
    assert dup.status_code == 400
    assert error_of(dup)["msg"] == "Role exists"

    r = client.put(f"/api/roles/{role['id']}/permissions", json={"permission_ids": [p3.id]},
                   headers=headers)
    assert r.status_code == 200
    assert [rp["permission"]["subject"] for rp in r.json()["permissions"]] == ["Budget"]

    r = client.put(f"/api/roles/{role['id']}", json={"name": "Caja", "description": "Cobros"},
                   headers=headers)
    assert r.json()["name"] == "Caja"

    listed = client.get("/api/roles/", headers=headers).json()
    assert [x["name"] for x in listed] == ["Caja"]


def test_unknown_permission_ids_are_rejected(client, db):
    headers = admin(db)
    role = client.post("/api/roles/", json={"name": "Caja"}, headers=headers).json()
    r = client.put(f"/api/roles/{role['id']}/permissions", json={"permission_ids": [999]},
                   headers=headers)
    assert r.status_code == 400
    assert "999" in error_of(r)["msg"]


def test_system_role_cannot_be_deleted(client, db):
    headers = admin(db)
    sync_permissions(db)
    sys_role = db.query(Role).filter(Role.name == settings.ADMIN_ROLE_NAME).one()

    r = client.delete(f"/api/roles/{sys_role.id}", headers=headers)
    assert r.status_code == 400


def test_delete_role_with_users_needs_target(client, db):
    headers = admin(db)
    user = make_user(db, "luis@clinic.test", role_name="Temporal")
    source_id = user.roles[0].id
    target = client.post("/api/roles/", json={"name": "Caja"}, headers=headers).json()

    r = client.delete(f"/api/roles/{source_id}", headers=headers)
    assert r.status_code == 409
    assert error_of(r)["code"] == "conflict"

    users = client.get(f"/api/roles/{source_id}/users", headers=headers).json()
    assert [u["email"] for u in users] == ["luis@clinic.test"]

    r = client.delete(f"/api/roles/{source_id}", params={"reassign_to": target["id"]}, headers=headers)
    assert r.status_code == 200
    assert r.json()["moved"] == 1

    db.expire_all()
    assert db.get(Role, source_id) is None
    assert [x.name for x in db.get(User, user.id).roles] == ["Caja"]


def test_reassign_users(client, db):
    headers = admin(db)
    user = make_user(db, "eva@clinic.test", role_name="Antiguo")
    source_id = user.roles[0].id
    target = client.post("/api/roles/", json={"name": "Nuevo"}, headers=headers).json()

    r = client.post(f"/api/roles/{source_id}/reassign", json={"target_role_id": target["id"]},
                    headers=headers)
    assert r.json() == {"message": "Reassigned", "moved": 1}
    assert client.get(f"/api/roles/{source_id}/users", headers=headers).json() == []

    same = client.post(f"/api/roles/{source_id}/reassign", json={"target_role_id": source_id},
                       headers=headers)
    assert same.status_code == 400


def test_unknown_role_is_404(client, db):
    r = client.put("/api/roles/4242", json={"name": "x"}, headers=admin(db))
    assert r.status_code == 404
    assert error_of(r)["code"] == "not_found"


# ---------------------------------------------------------------------------
# matrix / export / telemetry / navigation
# ---------------------------------------------------------------------------

def test_matrix_covers_every_permission_once(client, db):
    headers = admin(db)
    sync_permissions(db)
    get_or_create_permission(db, "read", "ZZZUnmapped")
    db.commit()

    m = client.get("/api/roles/matrix", headers=headers).json()

    ids = [pid for s in m["sections"] for i in s["items"] for pid in i["permission_ids"]]
    all_ids = {p.id for p in db.query(Permission).all()}
    assert sorted(ids) == sorted(all_ids)
    assert m["sections"][-1]["title"] == "Otros Permisos de Sistema"
    assert "zzzunmapped" in m["unmapped_subjects"]


def test_matrix_export(client, db):
    headers = admin(db)
    sync_permissions(db)

    r = client.get("/api/roles/matrix/export", headers=headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")

    wb = load_workbook(io.BytesIO(r.content))
    header = next(wb["Permisos"].iter_rows(values_only=True))
    assert settings.ADMIN_ROLE_NAME in header


def test_unmapped_subjects_report_is_stored(client, db):
    make_user(db, "viewer@clinic.test")
    r = client.post(
        "/api/roles/telemetry/unmapped-subjects",
        json={"subjects": ["Backup", "zzz"], "total": 2, "timestamp": "2026-01-02T03:04:05Z"},
        headers=auth_headers("viewer@clinic.test"),
    )
    assert r.status_code == 200

    row = db.query(UnmappedSubjectReport).one()
    assert row.subjects == ["backup", "zzz"]
    assert row.total == 2
    assert row.reported_at.hour == 3


def test_navigation_is_filtered_by_permissions(client, db):
    make_user(db, "rrhh@clinic.test", perms=[("read", "Role")])
    sections = client.get("/api/navigation/sections", headers=auth_headers("rrhh@clinic.test")).json()

    subjects = {
        (i["required_permission"] or {}).get("subject")
        for s in sections for i in s["items"]
    }
    assert "Role" in subjects
    assert subjects <= {"Role", None}


def _nav_subjects(sections):
    return {
        (i["required_permission"] or {}).get("subject")
        for s in sections for i in s["items"]
    }


def test_navigation_preview_as_role(client, db):
    headers = admin(db)
    recepcion = Role(name="Recepción", description="front desk")
    recepcion.permissions = [get_or_create_permission(db, "read", "Patient")]
    db.add(recepcion)
    db.commit()

    r = client.get(f"/api/navigation/sections?role_id={recepcion.id}", headers=headers)
    assert r.status_code == 200
    subjects = _nav_subjects(r.json())
    # the admin bypass does not leak into the preview
    assert "Patient" in subjects
    assert subjects <= {"Patient", None}

    own = _nav_subjects(client.get("/api/navigation/sections", headers=headers).json())
    assert "Dashboard" in own


def test_navigation_preview_needs_role_read(client, db):
    make_user(db, "nurse@clinic.test", perms=[("read", "Patient")])
    headers = auth_headers("nurse@clinic.test")

    r = client.get("/api/navigation/sections?role_id=1", headers=headers)
    assert r.status_code == 403
    assert error_of(r)["msg"] == "Forbidden: missing read:Role"


def test_navigation_preview_unknown_role_is_404(client, db):
    r = client.get("/api/navigation/sections?role_id=9999", headers=admin(db))
    assert r.status_code == 404
