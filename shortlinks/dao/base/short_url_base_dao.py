"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-process memory).

Responsibilities:
    - Provide an interface for inserting, retrieving, listing, updating and
      deleting ShortURLModel objects.
    - Guarantee atomic compare-and-insert on shortcodes and atomic
      read-modify-write updates.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.models import ShortURLModel
        >>> from shortlinks.dao.memory import ShortURLMemoryDAO
        >>> from dataclasses import replace

        >>> dao = ShortURLMemoryDAO()
        >>> short_url = ShortURLModel.new(
        ...     target="https://example.com/blog/article-123",
        ...     shortcode="a1b2c3",
        ...     validity_minutes=30,
        ...     now=datetime.now(UTC),
        ... )
        >>> dao.insert(short_url)

        >>> dao.get("a1b2c3").target
        'https://example.com/blog/article-123'

        >>> dao.update(short_url.id, lambda current: replace(current, hits=current.hits + 1)).hits
        1

        >>> dao.delete(short_url.id).exists("a1b2c3")
        False
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from shortlinks.models import ShortURLModel


# Fields which may differ between the input and output of an update mutator
MUTABLE_FIELDS = frozenset({'hits'})


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Insert a new ShortURLModel into the data store.
            Raises ShortURLAlreadyExistsError if the shortcode already exists.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel from the data store by shortcode.
            Raises ShortURLNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or read failure.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether any record (expired or not) uses the shortcode.

        all(**kwargs) -> list[ShortURLModel]:
            Retrieve every stored ShortURLModel in insertion order.

        update(link_id: str, mutator: Callable, **kwargs) -> ShortURLModel:
            Atomically replace a record with mutator(record).
            Raises ShortURLNotFoundError if the entry does not exist.

        delete(link_id: str, **kwargs) -> ShortURLBaseDAO:
            Delete a record by id. Deleting a missing record is a no-op.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO or
        ShortURLMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - Expiry is not a storage concern. Expired records stay in the data
          store (and keep their shortcode reserved) until deleted.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Insert a new ShortURLModel into the data store.

        The existence check and the write must be a single atomic step, so
        two concurrent inserts of the same shortcode can't both succeed.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a ShortURLModel with the same shortcode already exists

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its shortcode.

        Args:
            shortcode (str):
                The shortcode of the ShortURLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: The stored ShortURLModel instance.

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given shortcode exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a shortcode is taken by any stored record.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def all(self, **kwargs) -> list[ShortURLModel]:
        """Retrieve all stored ShortURLModel instances in insertion order.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def update(self, link_id: str, mutator: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        """Atomically apply a mutation to a stored record.

        The mutator receives the current record and returns its replacement.
        No other write to the same record may interleave between reading it
        and storing the mutator's result. An exception raised by the mutator
        aborts the update and propagates to the caller unchanged.

        Args:
            link_id (str):
                Id of the record to update.

            mutator (Callable[[ShortURLModel], ShortURLModel]):
                Pure function producing the new record. Only `hits` may change.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: The record as stored after the update.

        Raises:
            ShortURLNotFoundError:
                If no record with the given id exists.

            ValueError:
                If the mutator changed an immutable field.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, link_id: str, **kwargs) -> 'ShortURLBaseDAO':
        """Delete a record by id; a missing record is silently ignored.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @staticmethod
    def _check_mutation(current: ShortURLModel, updated: ShortURLModel) -> None:
        """Reject mutator results which touch anything but MUTABLE_FIELDS"""
        if not isinstance(updated, ShortURLModel):
            raise TypeError(f'Mutator must return a ShortURLModel (returned type: {type(updated)}).')

        changed = {name for name in current.__dataclass_fields__ if getattr(current, name) != getattr(updated, name)}
        if changed - MUTABLE_FIELDS:
            raise ValueError(f'Short URL fields are immutable: {", ".join(sorted(changed - MUTABLE_FIELDS))}.')
        if updated.hits < current.hits:
            raise ValueError(f'Short URL hits must not decrease ({current.hits} -> {updated.hits}).')
