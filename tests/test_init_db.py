from app.core.config import settings
from app.core.security import verify_password
from app.db.init_db import ensure_admin_user


def test_bootstrap_admin_is_linked_to_system_role(db):
    user = ensure_admin_user(db, " Admin@Clinic.test ", "s3cret")
    db.commit()

    assert user.email == "admin@clinic.test"
    assert user.is_admin
    assert verify_password("s3cret", user.password_hash)
    assert [r.name for r in user.roles] == [settings.ADMIN_ROLE_NAME]

    again = ensure_admin_user(db, "admin@clinic.test", "other")
    db.commit()
    assert again.id == user.id
    assert len(again.roles) == 1
