from app.models.base import Base
from app.models.business import Business
from app.models.deal import Deal, DealStatus, BOOKMARKABLE_STATUSES
from app.models.bookmark import Bookmark

__all__ = [
    'Base', 'Business', 'Deal', 'DealStatus', 'BOOKMARKABLE_STATUSES', 'Bookmark',
]
