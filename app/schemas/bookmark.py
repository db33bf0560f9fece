from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.models.base import isoformat_utc


class BookmarkRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    deal_id: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        # Même format que bookmarked_at dans le listing
        return isoformat_utc(value)


class BookmarkPage(BaseModel):
    # Deals résolus de la fenêtre (champs publics + business)
    items: List[Dict[str, Any]]
    # Nombre brut de bookmarks, y compris ceux dont le deal n'existe plus
    total: int
    page: int
    page_size: int
    has_more: bool


class BulkStatusIn(BaseModel):
    deal_ids: List[str] = Field(default_factory=list)
