"""In-process implementation of ShortURLBaseDAO

Keeps records in plain dictionaries guarded by a re-entrant lock. Every
operation, including the mutator run of `update`, executes while holding the
lock, so the store is a single-writer critical section within one process.

Useful for local runs, tests and single-instance deployments without Redis.

Example:
    >>> from shortlinks.dao.memory import ShortURLMemoryDAO
    >>> dao = ShortURLMemoryDAO()
    >>> dao.exists('abc123')
    False
"""

import logging
import threading
from collections.abc import Callable

from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


logger = logging.getLogger(__name__)


class ShortURLMemoryDAO(ShortURLBaseDAO):
    """Dictionary-backed DAO for ShortURLModel records

    Attributes:
        _records (dict[str, ShortURLModel]):
            Records keyed by shortcode. Dict order is insertion order.
        _ids (dict[str, str]):
            Record id -> shortcode index.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._records: dict[str, ShortURLModel] = {}
        self._ids: dict[str, str] = {}

    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            if short_url.shortcode in self._records:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            self._records[short_url.shortcode] = short_url
            self._ids[short_url.id] = short_url.shortcode

        logger.debug('Inserted short URL record.', extra={'shortcode': short_url.shortcode, 'linkId': short_url.id})
        return self

    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        with self._lock:
            try:
                return self._records[shortcode]
            except KeyError:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.") from None

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            return shortcode in self._records

    def all(self, **kwargs) -> list[ShortURLModel]:
        with self._lock:
            return list(self._records.values())

    @beartype
    def update(self, link_id: str, mutator: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        """Apply `mutator` to the record with `link_id` while holding the store lock

        Raises:
            ShortURLNotFoundError: If no record has the given id.
            ValueError: If the mutator changed an immutable field.
        """
        with self._lock:
            shortcode = self._ids.get(link_id)
            if shortcode is None:
                raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

            current = self._records[shortcode]
            updated = mutator(current)
            self._check_mutation(current, updated)
            self._records[shortcode] = updated
            return updated

    @beartype
    def delete(self, link_id: str, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            shortcode = self._ids.pop(link_id, None)
            if shortcode is not None:
                del self._records[shortcode]
                logger.debug('Deleted short URL record.', extra={'shortcode': shortcode, 'linkId': link_id})
        return self
