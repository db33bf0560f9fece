from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import and_, delete, func, select
from sqlalchemy.orm import Session

from app.models.bookmark import Bookmark
from app.models.deal import Deal


class BookmarkRepository:
    """
    Repository pour les lignes de la table bookmarks.
    Clé logique: (user_id, deal_id), protégée par uq_bookmarks_user_deal.
    """

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str, deal_id: str) -> Optional[Bookmark]:
        return self.session.execute(
            select(Bookmark).where(Bookmark.user_id == user_id, Bookmark.deal_id == deal_id)
        ).scalar_one_or_none()

    def add(self, user_id: str, deal_id: str) -> Bookmark:
        """
        Insère un bookmark et flush immédiatement.

        Le flush fait remonter une éventuelle IntegrityError (contrainte
        d'unicité) à l'intérieur de l'unité de travail de l'appelant.
        """
        bookmark = Bookmark(user_id=user_id, deal_id=deal_id)
        self.session.add(bookmark)
        self.session.flush()
        return bookmark

    def delete(self, user_id: str, deal_id: str) -> int:
        """Supprime le bookmark en un seul DELETE. Retourne le nombre de lignes supprimées."""
        result = self.session.execute(
            delete(Bookmark)
            .where(Bookmark.user_id == user_id, Bookmark.deal_id == deal_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def count_for_user(self, user_id: str) -> int:
        return self.session.execute(
            select(func.count(Bookmark.id)).where(Bookmark.user_id == user_id)
        ).scalar() or 0

    def page_for_user(self, user_id: str, offset: int, limit: int) -> List[Tuple[Bookmark, Optional[Deal]]]:
        """
        Fenêtre de bookmarks d'un utilisateur, plus récents d'abord.

        Jointure externe vers le deal non supprimé: deal vaut None si le
        deal n'existe plus (purgé ou supprimé logiquement).
        """
        stmt = (
            select(Bookmark, Deal)
            .outerjoin(Deal, and_(Deal.id == Bookmark.deal_id, Deal.deleted_at.is_(None)))
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [(row[0], row[1]) for row in self.session.execute(stmt).all()]

    def deal_ids_for_user(self, user_id: str, deal_ids: Iterable[str]) -> Set[str]:
        """Sous-ensemble de deal_ids que l'utilisateur a en bookmark."""
        ids = list(deal_ids)
        if not ids:
            return set()
        return set(
            self.session.execute(
                select(Bookmark.deal_id).where(Bookmark.user_id == user_id, Bookmark.deal_id.in_(ids))
            ).scalars()
        )
