from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict


class PermissionOut(BaseModel):
    id: int
    action: str
    subject: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SyncResultOut(BaseModel):
    synced: bool
    reason: str
    created: int = 0
    deleted: int = 0
