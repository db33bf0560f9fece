"""
Hiérarchie d'exceptions pour les bookmarks.

Permet de distinguer:
- Ressource absente (deal ou bookmark) -> 404
- Conflit métier (deal non éligible, déjà en bookmark) -> 409

Les erreurs de stockage (connexion perdue, timeout) ne sont pas encapsulées:
elles remontent telles quelles depuis SQLAlchemy.
"""
from fastapi import HTTPException

DEAL = "deal"
BOOKMARK = "bookmark"

DEAL_NOT_ELIGIBLE = "deal not eligible"
ALREADY_BOOKMARKED = "already bookmarked"

# Messages exposés au client (l'app mobile matche "already bookmarked")
_NOT_FOUND_MESSAGES = {
    DEAL: "Deal not found",
    BOOKMARK: "Bookmark not found",
}
_CONFLICT_MESSAGES = {
    DEAL_NOT_ELIGIBLE: "Can only bookmark active deals",
    ALREADY_BOOKMARKED: "Deal already bookmarked",
}


class BookmarkError(Exception):
    """Exception de base pour le sous-système bookmarks."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(BookmarkError):
    """Deal ou bookmark introuvable."""

    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(_NOT_FOUND_MESSAGES.get(resource, f"{resource.capitalize()} not found"))


class ConflictError(BookmarkError):
    """Précondition métier violée (éligibilité, unicité)."""

    status_code = 409

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(_CONFLICT_MESSAGES.get(reason, reason))


def bookmark_error_to_http(exc: BookmarkError) -> HTTPException:
    """Convertit une BookmarkError en HTTPException pour les routes."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
