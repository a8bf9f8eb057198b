from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class Permission(Base):
    """
    One (action, subject) pair, e.g. ("read", "Patient").
    Rows are owned by the sync process (app/services/permission_sync.py).
    """
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("action", "subject", name="uq_permissions_action_subject"),
        {
            "mysql_engine": "InnoDB",
            "mysql_charset": "utf8mb4",
            "mysql_collate": "utf8mb4_unicode_ci",
        },
    )

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(50), nullable=False)
    subject = Column(String(120), nullable=False, index=True)
    description = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow,
                        nullable=False)

    roles = relationship("Role", secondary="role_permissions", back_populates="permissions")

    @property
    def key(self) -> str:
        return f"{self.action}:{self.subject}"
