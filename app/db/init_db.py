# app/db/init_db.py
from __future__ import annotations

import argparse
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.core.security import hash_password
from app.db.base import Base, import_models
from app.db.session import engine
from app.models.user import User
from app.services.permission_sync import sync_permissions
from app.services.rbac_helpers import ensure_system_roles

logger = logging.getLogger(__name__)


def print_tables() -> set:
    names = sorted(inspect(engine).get_table_names())
    print("Existing tables:", names)
    return set(names)


def ensure_admin_user(db: Session, email: str, password: str, name: str = "Administrador") -> User:
    """
    Creates (or re-links) the bootstrap admin user. Does NOT commit.
    """
    email = email.strip().lower()
    admin_role = ensure_system_roles(db)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(name=name, email=email, password_hash=hash_password(password),
                    is_active=True, is_admin=True)
        db.add(user)
        print(f"Admin user {email} created.")
    if admin_role not in user.roles:
        user.roles.append(admin_role)
    return user


def run(fresh: bool = False, admin_email: str | None = None, admin_password: str | None = None) -> None:
    import_models()

    if fresh:
        print("WARNING: Dropping ALL tables (dev only) …")
        Base.metadata.drop_all(bind=engine)

    print("Creating all missing tables …")
    Base.metadata.create_all(bind=engine)
    print_tables()

    try:
        with Session(engine) as db:
            result = sync_permissions(db, force=True)
            print(f"Permissions synced: {result.created} created, {result.deleted} deleted.")

            if admin_email and admin_password:
                ensure_admin_user(db, admin_email, admin_password)
                db.commit()
    except SQLAlchemyError as e:
        print("Seeding failed:", e)
        raise


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    parser = argparse.ArgumentParser(
        description="Initialize DB (create tables, sync permissions, bootstrap admin).")
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Drop & recreate all tables (DEV ONLY).",
    )
    parser.add_argument("--admin-email", default=None, help="Bootstrap admin email")
    parser.add_argument("--admin-password", default=None, help="Bootstrap admin password")
    args = parser.parse_args()
    run(fresh=args.fresh, admin_email=args.admin_email, admin_password=args.admin_password)
