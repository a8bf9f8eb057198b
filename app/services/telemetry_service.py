# app/services/telemetry_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.telemetry import UnmappedSubjectReport

logger = logging.getLogger(__name__)


def record_unmapped_subjects(db: Session, subjects: List[str], total: Optional[int] = None,
                             reported_at: Optional[datetime] = None,
                             reported_by_id: Optional[int] = None) -> UnmappedSubjectReport:
    clean = sorted({(s or "").strip().lower() for s in subjects if (s or "").strip()})
    if reported_at is not None and reported_at.tzinfo is not None:
        reported_at = reported_at.astimezone(timezone.utc).replace(tzinfo=None)
    logger.warning("Roles matrix reports %d unmapped subject(s): %s", len(clean), ", ".join(clean))

    row = UnmappedSubjectReport(
        subjects=clean,
        total=total if total is not None else len(clean),
        reported_at=reported_at,
        reported_by_id=reported_by_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
