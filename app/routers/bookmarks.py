"""
Bookmarks Router - Deals sauvegardés par l'utilisateur.
Endpoints: /v1/bookmarks/*
"""
from typing import Optional

from fastapi import APIRouter, Depends

from app.core.exceptions import BookmarkError, bookmark_error_to_http
from app.core.security import get_current_user_id
from app.schemas.bookmark import BulkStatusIn
from app.services.bookmark_service import BookmarkStore

router = APIRouter(prefix="/v1/bookmarks", tags=["bookmarks"])

_store = BookmarkStore()


def get_bookmark_store() -> BookmarkStore:
    return _store


# Déclarée avant POST /{deal_id}: un deal d'id littéral "status" n'est pas
# bookmarkable, sans conséquence avec des ids UUID.
@router.post("/status")
def bulk_status(
    payload: BulkStatusIn,
    user_id: str = Depends(get_current_user_id),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    """Statut bookmark pour une liste de deals (cartes du feed)."""
    return store.bulk_status(user_id, payload.deal_ids)


@router.get("/check/{deal_id}")
def check_bookmark(
    deal_id: str,
    user_id: str = Depends(get_current_user_id),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    return {"isBookmarked": store.is_bookmarked(user_id, deal_id)}


@router.post("/{deal_id}", status_code=201)
def add_bookmark(
    deal_id: str,
    user_id: str = Depends(get_current_user_id),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    """Ajoute un deal aux bookmarks."""
    try:
        bookmark = store.save(user_id, deal_id)
    except BookmarkError as e:
        raise bookmark_error_to_http(e)

    return {
        "message": "Deal bookmarked",
        "bookmark": bookmark.model_dump(mode="json"),
    }


@router.delete("/{deal_id}")
def remove_bookmark(
    deal_id: str,
    user_id: str = Depends(get_current_user_id),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    """Retire un deal des bookmarks."""
    try:
        store.unsave(user_id, deal_id)
    except BookmarkError as e:
        raise bookmark_error_to_http(e)

    return {"message": "Bookmark removed successfully"}


@router.get("")
def list_bookmarks(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    user_id: str = Depends(get_current_user_id),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    """Liste les bookmarks de l'utilisateur, plus récents d'abord."""
    result = store.list_for_user(user_id, page=page, page_size=limit)
    return {
        "deals": result.items,
        "total": result.total,
        "page": result.page,
        "limit": result.page_size,
        "hasMore": result.has_more,
    }
