import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Float, Integer, Text, DateTime, ForeignKey, Index, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, isoformat_utc, utcnow


class DealStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    EXPIRED = "expired"
    SOLD_OUT = "sold_out"


# Seuls ces statuts acceptent de nouveaux bookmarks.
# Les bookmarks existants restent valides si le deal change de statut.
BOOKMARKABLE_STATUSES = frozenset({DealStatus.ACTIVE.value})


class Deal(Base):
    """
    Deal publié par un commerce.

    save_count est un compteur dénormalisé du nombre de bookmarks vivants.
    Il n'est jamais modifié en lecture-modification-écriture applicative:
    voir DealCatalog.apply_counter_delta.
    """
    __tablename__ = "deals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id: Mapped[str] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    original_price: Mapped[float] = mapped_column(Float, nullable=False)
    discounted_price: Mapped[float] = mapped_column(Float, nullable=False)
    discount_percentage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    category: Mapped[str] = mapped_column(String(50), nullable=False)

    # [{"url": ..., "caption": ..., "order": ...}]
    images: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DealStatus.ACTIVE.value)

    # Stats
    save_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Soft delete: un deal supprimé n'existe plus pour les bookmarks
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    business = relationship("Business", lazy="joined")

    __table_args__ = (
        CheckConstraint("save_count >= 0", name="ck_deals_save_count_non_negative"),
        Index("ix_deals_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Deal {self.id} - {self.title[:30]} [{self.status}] saves={self.save_count}>"

    @property
    def is_bookmarkable(self) -> bool:
        return self.status in BOOKMARKABLE_STATUSES

    def to_api_dict(self) -> dict:
        """Champs publics du deal pour l'API."""
        return {
            "id": self.id,
            "business_id": self.business_id,
            "title": self.title,
            "description": self.description,
            "original_price": self.original_price,
            "discounted_price": self.discounted_price,
            "discount_percentage": self.discount_percentage,
            "category": self.category,
            "images": self.images or [],
            "starts_at": isoformat_utc(self.starts_at),
            "expires_at": isoformat_utc(self.expires_at),
            "status": self.status,
            "save_count": self.save_count,
            "created_at": isoformat_utc(self.created_at),
        }
