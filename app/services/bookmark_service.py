"""
Service des bookmarks (deals sauvegardés).

Invariants protégés:
- au plus un bookmark vivant par (user_id, deal_id): la contrainte
  uq_bookmarks_user_deal fait foi, le pré-check n'est qu'un raccourci;
- deals.save_count suit le nombre de bookmarks vivants: l'insert et le +1
  sont dans la même transaction, le compteur n'est modifié que par
  DealCatalog.apply_counter_delta.

Aucun retry ici: les erreurs de stockage remontent à l'appelant.
"""
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    ALREADY_BOOKMARKED,
    BOOKMARK,
    DEAL,
    DEAL_NOT_ELIGIBLE,
)
from app.core.logging import get_logger
from app.db.session import get_db_session
from app.jobs_counters import enqueue_save_count_reconcile
from app.models.base import isoformat_utc
from app.repositories.bookmark_repository import BookmarkRepository
from app.repositories.deal_repository import DealCatalog
from app.schemas.bookmark import BookmarkPage, BookmarkRead

logger = get_logger(__name__)

UNIQUE_CONSTRAINT_NAME = "uq_bookmarks_user_deal"

# SQLSTATE Postgres
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    msg = str(orig)
    return UNIQUE_CONSTRAINT_NAME in msg or "UNIQUE constraint failed" in msg


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY constraint failed" in str(orig)


def normalize_pagination(page: Optional[int], page_size: Optional[int]):
    """Page et taille par défaut si absentes ou non positives. Pas de borne haute."""
    if not page or page < 1:
        page = DEFAULT_PAGE
    if not page_size or page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


class BookmarkStore:
    """Cycle de vie des bookmarks et synchronisation de deals.save_count."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def _session(self):
        return get_db_session(self.session_factory)

    def save(self, user_id: str, deal_id: str) -> BookmarkRead:
        """
        Sauvegarde un deal pour l'utilisateur.

        Préconditions vérifiées dans l'ordre, dans une seule transaction:
        deal existant, deal éligible, pas de bookmark existant. Puis insert
        et +1 sur save_count: les deux sont committés ensemble ou pas du tout.

        Raises:
            NotFoundError("deal"), ConflictError("deal not eligible"),
            ConflictError("already bookmarked")
        """
        with self._session() as session:
            catalog = DealCatalog(session)
            repo = BookmarkRepository(session)

            deal = catalog.get_deal(deal_id)
            if not deal.is_bookmarkable:
                raise ConflictError(DEAL_NOT_ELIGIBLE)

            if repo.get(user_id, deal_id) is not None:
                logger.bookmark_conflict(user_id, deal_id, ALREADY_BOOKMARKED, detected_by="precheck")
                raise ConflictError(ALREADY_BOOKMARKED)

            try:
                bookmark = repo.add(user_id, deal_id)
            except IntegrityError as e:
                # Un save concurrent a passé le pré-check en même temps
                if _is_unique_violation(e):
                    logger.bookmark_conflict(user_id, deal_id, ALREADY_BOOKMARKED, detected_by="constraint")
                    raise ConflictError(ALREADY_BOOKMARKED) from None
                if _is_foreign_key_violation(e):
                    raise NotFoundError(DEAL) from None
                raise

            catalog.apply_counter_delta(deal_id, +1)
            result = BookmarkRead.model_validate(bookmark)

        logger.bookmark_saved(user_id, deal_id, result.id)
        return result

    def unsave(self, user_id: str, deal_id: str) -> None:
        """
        Retire un deal des bookmarks de l'utilisateur.

        La suppression est committée d'abord. Le -1 sur save_count suit dans
        une seconde transaction: s'il échoue, la suppression reste acquise,
        l'échec est loggé et une réconciliation du compteur est planifiée.

        Raises:
            NotFoundError("bookmark")
        """
        with self._session() as session:
            if BookmarkRepository(session).delete(user_id, deal_id) == 0:
                raise NotFoundError(BOOKMARK)

        logger.bookmark_removed(user_id, deal_id)

        try:
            with self._session() as session:
                DealCatalog(session).apply_counter_delta(deal_id, -1)
        except NotFoundError as e:
            # Deal purgé entre-temps: plus de compteur à maintenir
            logger.warning("save_count_deal_missing", user_id=user_id, deal_id=deal_id, error_type=type(e).__name__)
        except SQLAlchemyError as e:
            logger.counter_error(deal_id, -1, e)
            enqueue_save_count_reconcile(deal_id)

    def list_for_user(
        self,
        user_id: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> BookmarkPage:
        """
        Bookmarks de l'utilisateur, plus récents d'abord.

        total compte toutes les lignes bookmarks de l'utilisateur; les
        bookmarks dont le deal n'existe plus sont exclus des items mais
        restent comptés dans total.
        """
        page, page_size = normalize_pagination(page, page_size)
        offset = (page - 1) * page_size

        with self._session() as session:
            repo = BookmarkRepository(session)
            rows = repo.page_for_user(user_id, offset=offset, limit=page_size)
            total = repo.count_for_user(user_id)

            items = []
            for bookmark, deal in rows:
                if deal is None:
                    continue
                item = deal.to_api_dict()
                item["business"] = deal.business.to_public_dict() if deal.business else None
                item["isBookmarked"] = True
                item["bookmarked_at"] = isoformat_utc(bookmark.created_at)
                items.append(item)

        return BookmarkPage(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            # Fenêtre brute (avant filtrage des deals disparus)
            has_more=offset + len(rows) < total,
        )

    def is_bookmarked(self, user_id: str, deal_id: str) -> bool:
        with self._session() as session:
            return BookmarkRepository(session).get(user_id, deal_id) is not None

    def bulk_status(self, user_id: str, deal_ids: Iterable[str]) -> Dict[str, bool]:
        """Statut bookmark pour chaque deal_id fourni. Entrée vide -> {}."""
        status = {deal_id: False for deal_id in deal_ids}
        if not status:
            return {}

        with self._session() as session:
            bookmarked = BookmarkRepository(session).deal_ids_for_user(user_id, status.keys())

        for deal_id in bookmarked:
            status[deal_id] = True
        return status
