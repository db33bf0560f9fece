"""Bookmark model - Deals sauvegardés par les utilisateurs."""
from datetime import datetime

from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Bookmark(Base):
    """Deal sauvegardé par un utilisateur. Jamais modifié: créé puis supprimé."""

    __tablename__ = "bookmarks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # L'utilisateur appartient au service d'auth: pas de FK
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    deal_id: Mapped[str] = mapped_column(ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Contrainte unique: c'est elle qui fait foi en cas de saves concurrents
    __table_args__ = (
        UniqueConstraint("user_id", "deal_id", name="uq_bookmarks_user_deal"),
        Index("ix_bookmarks_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Bookmark user={self.user_id} deal={self.deal_id}>"
