from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime

from app.db.base import Base


class Setting(Base):
    """Plain key/value store (e.g. permissions_sync_hash)."""
    __tablename__ = "settings"
    __table_args__ = {
        "mysql_engine": "InnoDB",
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(120), unique=True, nullable=False)
    value = Column(Text, nullable=True)

    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)
