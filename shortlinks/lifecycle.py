"""Short URL lifecycle engine

Owns every state transition of a short URL record:

    (absent) --shorten--> Active --time passes--> Expired --remove/purge--> (absent)
                            |                                      ^
                            +------------------remove--------------+

Responsibilities:
    - Validate shorten requests (destination URL, custom shortcode, validity period);
    - Enforce the active link quota;
    - Allocate shortcodes: custom ones must be free, generated ones are redrawn
      on collision a bounded number of times;
    - Resolve shortcodes to their destination, counting exactly one click per
      successful resolution;
    - Remove records and purge long-expired ones.

Expiry is never stored. It's evaluated against the engine's clock at the
moment an operation needs it.

Classes:
    ShortURLLifecycle:
        Engine bound to one ShortURLBaseDAO.

Example:
    >>> from shortlinks.dao.memory import ShortURLMemoryDAO
    >>> engine = ShortURLLifecycle(ShortURLMemoryDAO())
    >>> record = engine.shorten('https://example.com/docs', validity_minutes=60)
    >>> len(record.shortcode)
    6
    >>> engine.resolve(record.shortcode)
    'https://example.com/docs'
    >>> engine.records()[0].hits
    1
"""

import logging
import threading
import weakref
from dataclasses import replace
from datetime import timedelta

from shortlinks.constants import Defaults, Limits
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from shortlinks.exceptions import (
    InvalidUrlError,
    InvalidShortcodeError,
    InvalidValidityPeriodError,
    QuotaExceededError,
    ShortcodeInUseError,
    CodeSpaceExhaustedError,
    LinkNotFoundError,
    LinkExpiredError,
)
from shortlinks.models import ShortURLModel
from shortlinks.stats import LinkStats, summarize
from shortlinks.types import Clock, ShortcodeGenerator
from shortlinks.utils.config import ShortenerSettings
from shortlinks.utils.runtime import utc_now
from shortlinks.utils.shortener import generate_shortcode
from shortlinks.utils.validators import validate_url, validate_shortcode


logger = logging.getLogger(__name__)


# One shorten lock per record store, shared by every engine bound to it
_shorten_locks: weakref.WeakKeyDictionary[ShortURLBaseDAO, threading.Lock] = weakref.WeakKeyDictionary()
_shorten_locks_guard = threading.Lock()


def _shorten_lock_for(dao: ShortURLBaseDAO) -> threading.Lock:
    with _shorten_locks_guard:
        lock = _shorten_locks.get(dao)
        if lock is None:
            lock = _shorten_locks[dao] = threading.Lock()
        return lock


def _valid_validity_period(validity_minutes: object) -> bool:
    return (
        isinstance(validity_minutes, int)
        and not isinstance(validity_minutes, bool)
        and Limits.MIN_VALIDITY_MINUTES <= validity_minutes <= Limits.MAX_VALIDITY_MINUTES
    )


class ShortURLLifecycle:
    """Create, resolve and remove short URLs on top of a ShortURLBaseDAO

    Attributes:
        dao (ShortURLBaseDAO):
            Record store. Must provide atomic insert and update.
        active_link_quota (int):
            Maximum number of simultaneously Active records.
        max_generation_attempts (int):
            Shortcode draws per shorten call before CodeSpaceExhaustedError.
        shortcode_length (int):
            Length of generated shortcodes.
        shortcode_generator (Callable[[int], str]):
            Produces a random shortcode of the given length.
        clock (Callable[[], datetime]):
            Source of the current UTC time.

    NOTE:
        shorten() holds a lock from the quota check until the insert. The lock
        belongs to the DAO instance, not the engine, so every engine built on
        the same store in this process (handlers build one per invocation;
        dao_from_config shares memory stores per prefix) is serialized and
        can't overshoot the quota. Engines in other processes, or bound to
        another Redis DAO instance, aren't coordinated and may overshoot it
        by the number of racing inserts.
        resolve() relies on the store's atomic update alone.
    """

    def __init__(
        self,
        dao: ShortURLBaseDAO,
        *,
        active_link_quota: int = Defaults.ACTIVE_LINK_QUOTA,
        max_generation_attempts: int = Defaults.MAX_GENERATION_ATTEMPTS,
        shortcode_length: int = Defaults.SHORTCODE_LENGTH,
        shortcode_generator: ShortcodeGenerator = generate_shortcode,
        clock: Clock = utc_now,
    ):
        if active_link_quota < 1:
            raise ValueError(f'Active link quota must be positive (given value: {active_link_quota}).')
        if max_generation_attempts < 1:
            raise ValueError(f'Max generation attempts must be positive (given value: {max_generation_attempts}).')

        self.dao = dao
        self.active_link_quota = active_link_quota
        self.max_generation_attempts = max_generation_attempts
        self.shortcode_length = shortcode_length
        self.shortcode_generator = shortcode_generator
        self.clock = clock
        self._shorten_lock = _shorten_lock_for(dao)

    @classmethod
    def from_settings(cls, dao: ShortURLBaseDAO, settings: ShortenerSettings, **kwargs) -> 'ShortURLLifecycle':
        return cls(
            dao,
            active_link_quota=settings.active_link_quota,
            max_generation_attempts=settings.max_generation_attempts,
            **kwargs,
        )

    def shorten(
        self,
        target: str,
        shortcode: str | None = '',
        validity_minutes: int = Defaults.VALIDITY_MINUTES,
    ) -> ShortURLModel:
        """Create an Active short URL for `target`

        Checks run in this order: destination URL, validity period, custom
        shortcode, active link quota, shortcode availability.

        Args:
            target (str):
                Destination URL. Surrounding whitespace is stripped.
            shortcode (str | None):
                Custom shortcode. Empty or None generates one.
            validity_minutes (int):
                Lifetime of the link, 1 to 10080 minutes.

        Returns:
            ShortURLModel: The stored record (hits=0).

        Raises:
            InvalidUrlError, InvalidValidityPeriodError, InvalidShortcodeError:
                Rejected input.
            QuotaExceededError:
                If active_link_quota records are already Active.
            ShortcodeInUseError:
                If the custom shortcode is taken by any record, expired or not.
            CodeSpaceExhaustedError:
                If no free shortcode was drawn within max_generation_attempts.
            DataStoreError:
                If the record store is unavailable.
        """
        if isinstance(target, str):
            target = target.strip()
        if not validate_url(target):
            raise InvalidUrlError(f'Invalid destination URL: {target!r}. Expected an absolute URL with scheme and host.')

        if not _valid_validity_period(validity_minutes):
            raise InvalidValidityPeriodError(
                f'Validity period must be an integer between {Limits.MIN_VALIDITY_MINUTES} '
                f'and {Limits.MAX_VALIDITY_MINUTES} minutes (given value: {validity_minutes!r}).'
            )

        if shortcode is None:
            shortcode = ''
        if not validate_shortcode(shortcode):
            raise InvalidShortcodeError(
                f'Shortcode must be {Limits.MIN_SHORTCODE_LENGTH}-{Limits.MAX_SHORTCODE_LENGTH} '
                f'alphanumeric characters (given value: {shortcode!r}).'
            )

        with self._shorten_lock:
            now = self.clock()

            active = self._count_active(now)
            if active >= self.active_link_quota:
                raise QuotaExceededError(
                    f'Maximum of {self.active_link_quota} active links reached. Wait for a link to expire or remove one.'
                )

            if shortcode:
                record = self._insert_custom(target, shortcode, validity_minutes, now)
            else:
                record = self._insert_generated(target, validity_minutes, now)

        logger.info(
            'Created short URL.',
            extra={
                'shortcode': record.shortcode,
                'linkId': record.id,
                'validityMinutes': record.validity_minutes,
                'expiresAt': record.expires_at.isoformat(),
                'custom': bool(shortcode),
            },
        )
        return record

    def click(self, shortcode: str) -> ShortURLModel:
        """Count one click on an Active link and return the updated record

        The expiry check runs inside the store's atomic update, so a record
        is never counted after it expired and concurrent clicks are never lost.

        Raises:
            LinkNotFoundError:
                If no record has the shortcode (or it was deleted concurrently).
            LinkExpiredError:
                If the record is Expired at resolution time.
            DataStoreError:
                If the record store is unavailable.
        """
        if not isinstance(shortcode, str):
            raise LinkNotFoundError(f'No short link for code {shortcode!r}.')

        try:
            record = self.dao.get(shortcode)
        except ShortURLNotFoundError as e:
            raise LinkNotFoundError(f"No short link for code '{shortcode}'.") from e

        def _count_click(current: ShortURLModel) -> ShortURLModel:
            if current.is_expired(self.clock()):
                raise LinkExpiredError(f"Short link '{shortcode}' expired at {current.expires_at.isoformat()}.")
            return replace(current, hits=current.hits + 1)

        try:
            return self.dao.update(record.id, _count_click)
        except ShortURLNotFoundError as e:
            raise LinkNotFoundError(f"No short link for code '{shortcode}'.") from e

    def resolve(self, shortcode: str) -> str:
        """Return the destination of an Active link, counting the click"""
        return self.click(shortcode).target

    def remove(self, link_id: str) -> None:
        """Delete a record by id. Unknown ids are ignored."""
        self.dao.delete(link_id)
        logger.info('Removed short URL.', extra={'linkId': link_id})

    def records(self) -> list[ShortURLModel]:
        return self.dao.all()

    def stats(self) -> LinkStats:
        return summarize(self.dao.all(), self.clock())

    def is_shortcode_unique(self, shortcode: str) -> bool:
        return not self.dao.exists(shortcode)

    def active_count(self) -> int:
        return self._count_active(self.clock())

    def purge_expired(self, retention_minutes: int = Defaults.EXPIRED_RETENTION_MINUTES) -> list[ShortURLModel]:
        """Delete records which expired more than `retention_minutes` ago

        Records still inside the retention window are kept and keep failing
        resolution with LinkExpiredError.

        Returns:
            list[ShortURLModel]: The purged records.
        """
        if not isinstance(retention_minutes, int) or isinstance(retention_minutes, bool) or retention_minutes < 0:
            raise ValueError(f'Retention must be a non-negative number of minutes (given value: {retention_minutes!r}).')

        now = self.clock()
        retention = timedelta(minutes=retention_minutes)
        purged = []
        for record in self.dao.all():
            if now > record.expires_at + retention:
                self.dao.delete(record.id)
                purged.append(record)

        if purged:
            logger.info(
                'Purged expired short URLs.',
                extra={'purged': len(purged), 'shortcodes': [record.shortcode for record in purged]},
            )
        return purged

    def _count_active(self, now) -> int:
        return sum(1 for record in self.dao.all() if not record.is_expired(now))

    def _insert_custom(self, target: str, shortcode: str, validity_minutes: int, now) -> ShortURLModel:
        if self.dao.exists(shortcode):
            raise ShortcodeInUseError(f"Shortcode '{shortcode}' is already in use.")

        record = ShortURLModel.new(target=target, shortcode=shortcode, validity_minutes=validity_minutes, now=now)
        try:
            self.dao.insert(record)
        except ShortURLAlreadyExistsError as e:
            raise ShortcodeInUseError(f"Shortcode '{shortcode}' is already in use.") from e
        return record

    def _insert_generated(self, target: str, validity_minutes: int, now) -> ShortURLModel:
        for attempt in range(1, self.max_generation_attempts + 1):
            candidate = self.shortcode_generator(self.shortcode_length)
            if self.dao.exists(candidate):
                logger.debug('Generated shortcode collides with a stored one.', extra={'shortcode': candidate, 'attempt': attempt})
                continue

            record = ShortURLModel.new(target=target, shortcode=candidate, validity_minutes=validity_minutes, now=now)
            try:
                self.dao.insert(record)
            except ShortURLAlreadyExistsError:
                logger.debug('Lost insert race for generated shortcode.', extra={'shortcode': candidate, 'attempt': attempt})
                continue
            return record

        raise CodeSpaceExhaustedError(f'No free shortcode found after {self.max_generation_attempts} attempts.')
