# dweetr/models/schemas.py

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from dweetr.models.dweet import Dweet


class DweetOut(BaseModel):
    id: int
    thing: str
    content: Dict[str, Any]
    is_private: bool
    token: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dweet) -> "DweetOut":
        return cls(
            id=row.id,
            thing=row.thing,
            content=row.payload,
            is_private=row.is_private,
            token=row.token if row.is_private else None,
            created_at=row.created_at,
        )

    def to_json(self) -> dict:
        # token only appears on private dweets
        return self.model_dump(mode="json", exclude_none=True)


class PublishResult(BaseModel):
    status: str = "success"
    thing: str
    data: Dict[str, Any]
    private: bool
    token: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
