from typing import List, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, DEAL
from app.models.bookmark import Bookmark
from app.models.deal import Deal


class DealCatalog:
    """
    Accès aux deals pour le sous-système bookmarks.

    Ne possède pas les deals: lit le statut et ne modifie que save_count,
    toujours via un UPDATE évalué par la base (jamais lecture-calcul-écriture).
    Toutes les opérations s'exécutent dans la session (transaction) de l'appelant.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_deal(self, deal_id: str) -> Deal:
        """Récupère un deal existant (non supprimé). Lève NotFoundError sinon."""
        deal = self.session.execute(
            select(Deal).where(Deal.id == deal_id, Deal.deleted_at.is_(None))
        ).scalar_one_or_none()
        if deal is None:
            raise NotFoundError(DEAL)
        return deal

    def apply_counter_delta(self, deal_id: str, delta: int) -> None:
        """
        Applique un delta atomique à save_count, plancher à 0.

        Lève NotFoundError si la ligne du deal n'existe plus.
        """
        new_value = Deal.save_count + delta
        result = self.session.execute(
            update(Deal)
            .where(Deal.id == deal_id)
            .values(save_count=case((new_value < 0, 0), else_=new_value))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(DEAL)

    def recount_save_count(self, deal_id: str) -> Tuple[int, int]:
        """
        Recalcule save_count depuis les bookmarks vivants.

        Returns: (ancienne valeur, nouvelle valeur)
        """
        cached = self.session.execute(
            select(Deal.save_count).where(Deal.id == deal_id).with_for_update()
        ).scalar_one_or_none()
        if cached is None:
            raise NotFoundError(DEAL)

        live = (
            select(func.count(Bookmark.id))
            .where(Bookmark.deal_id == deal_id)
            .scalar_subquery()
        )
        self.session.execute(
            update(Deal)
            .where(Deal.id == deal_id)
            .values(save_count=live)
            .execution_options(synchronize_session=False)
        )
        return cached, self.get_save_count(deal_id)

    def get_save_count(self, deal_id: str) -> int:
        count = self.session.execute(
            select(Deal.save_count).where(Deal.id == deal_id)
        ).scalar_one_or_none()
        if count is None:
            raise NotFoundError(DEAL)
        return count

    def all_deal_ids(self) -> List[str]:
        """Ids de tous les deals (y compris supprimés logiquement) pour un balayage complet."""
        return list(self.session.execute(select(Deal.id).order_by(Deal.id)).scalars())
