"""Business model - Commerce qui publie les deals."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Business(Base):
    """Commerce propriétaire des deals (lecture seule pour les bookmarks)."""

    __tablename__ = "businesses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # {"lat": ..., "lng": ...}
    location: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Business {self.slug}>"

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "business_name": self.business_name,
            "slug": self.slug,
            "logo_url": self.logo_url,
            "category": self.category,
            "location": self.location,
            "city": self.city,
        }
