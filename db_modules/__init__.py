"""Database domain mixins package."""

from .db_users import UserDbMixin
from .db_events import EventDbMixin
from .db_event_config import EventConfigDbMixin
from .db_studios import StudioDbMixin
from .db_dancers import DancerDbMixin
from .db_performances import PerformanceDbMixin
from .db_invitations import InvitationDbMixin

__all__ = [
    "UserDbMixin",
    "EventDbMixin",
    "EventConfigDbMixin",
    "StudioDbMixin",
    "DancerDbMixin",
    "PerformanceDbMixin",
    "InvitationDbMixin",
]
