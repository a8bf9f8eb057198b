# app/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All tables (users, roles, permissions, settings, telemetry) inherit from this."""
    pass


def import_models() -> None:
    # Import all models so metadata is complete for create_all()
    from app.models import (  # noqa: F401
        user,
        role,
        permission,
        setting,
        telemetry,
    )
