from .base import db, metadata, utcnow
from .users import User
from .swap_requests import SwapRequest
from .ratings import Rating
from .announcements import Announcement

__all__ = [
    'db',
    'metadata',
    'utcnow',
    'User',
    'SwapRequest',
    'Rating',
    'Announcement',
]
