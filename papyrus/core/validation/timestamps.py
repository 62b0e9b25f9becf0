"""Timestamp parsing and formatting for the letter store."""

from datetime import datetime, timezone
from typing import Optional, Union

from papyrus.utils.errors import ValidationError


class Timestamps:
    """Convert between store ISO-8601 strings and aware datetimes.

    Stored timestamps are always UTC with microsecond precision, so their
    string form sorts the same way as the instants they represent.
    """

    @staticmethod
    def now() -> datetime:
        """Current UTC time."""
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso(value: datetime) -> str:
        """Format a datetime as a store timestamp."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    @staticmethod
    def parse(value: Union[str, datetime, None]) -> Optional[datetime]:
        """Parse a store timestamp; naive values are taken as UTC."""
        if value is None or value == "":
            return None

        if isinstance(value, datetime):
            parsed = value
        else:
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError as e:
                raise ValidationError(f"Invalid timestamp: '{value}'") from e

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def parse_user_date(value: str) -> datetime:
        """Parse a date typed by a user (``YYYY-MM-DD`` or full ISO-8601)."""
        if not value or not value.strip():
            raise ValidationError("Date cannot be empty")

        try:
            parsed = datetime.strptime(value.strip(), "%Y-%m-%d")
        except ValueError:
            parsed = Timestamps.parse(value)

        return Timestamps.parse(parsed)
