"""Contact domain model"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Contact:
    """A local display name for another user's identifier."""

    id: str
    user_id: str
    contact_user_id: str
    display_name: str
    created_at: datetime
