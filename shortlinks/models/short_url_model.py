import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from enum import StrEnum


class LinkStatus(StrEnum):
    ACTIVE = 'active'
    EXPIRED = 'expired'


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL mapping.

    Expiry is never stored: `is_expired()` compares the given (or current)
    time against `expires_at` on every call.

    Attributes:
        id (str):
            Opaque unique identifier of the record.
        target (str):
            The original long URL that the short code redirects to.
        shortcode (str):
            The unique short identifier representing the shortened URL.
        validity_minutes (int):
            Requested lifetime of the link in minutes.
        created_at (datetime):
            Creation time (UTC).
        expires_at (datetime):
            created_at + validity_minutes. The link is expired strictly after it.
        hits (int):
            Number of successful redirects through the link.

    Example:
        >>> from datetime import datetime, UTC
        >>> url = ShortURLModel.new(
        ...     target="https://example.com/article/123",
        ...     shortcode="abc123",
        ...     validity_minutes=30,
        ...     now=datetime(2025, 10, 15, 12, 0, tzinfo=UTC),
        ... )
        >>> url.expires_at
        datetime.datetime(2025, 10, 15, 12, 30, tzinfo=datetime.timezone.utc)
        >>> url.hits
        0
        >>> url.is_expired(datetime(2025, 10, 15, 12, 30, tzinfo=UTC))
        False
    """

    id: str
    target: str
    shortcode: str
    validity_minutes: int
    created_at: datetime
    expires_at: datetime
    hits: int = 0

    @classmethod
    def new(cls, target: str, shortcode: str, validity_minutes: int, now: datetime) -> 'ShortURLModel':
        """Build a fresh record created at `now` with a new id and zero hits."""
        return cls(
            id=uuid.uuid4().hex,
            target=target,
            shortcode=shortcode,
            validity_minutes=validity_minutes,
            created_at=now,
            expires_at=now + timedelta(minutes=validity_minutes),
            hits=0,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) > self.expires_at

    def status(self, now: datetime | None = None) -> LinkStatus:
        return LinkStatus.EXPIRED if self.is_expired(now) else LinkStatus.ACTIVE
