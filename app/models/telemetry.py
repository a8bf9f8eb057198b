from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON

from app.db.base import Base


class UnmappedSubjectReport(Base):
    """
    Diagnostic beacon sent by the roles screen when some permission
    subjects could not be placed under any navigation entry.
    """
    __tablename__ = "unmapped_subject_reports"
    __table_args__ = {
        "mysql_engine": "InnoDB",
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id = Column(Integer, primary_key=True, index=True)

    subjects = Column(JSON, nullable=False)  # list[str], lowercased
    total = Column(Integer, nullable=False, default=0)

    # client clock (ISO string on the wire)
    reported_at = Column(DateTime, nullable=True)
    reported_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
