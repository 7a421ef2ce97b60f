"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for CRUD-like
operations with ShortURLModel instances.

Responsibilities:
    - Insert, retrieve, list and delete short URLs in Redis;
    - Atomically apply click-count updates;
    - Maintain the id index and the insertion-ordered shortcode index;
    - Provide defensive error handling and raise appropriate DAO exceptions.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from dataclasses import replace
    >>> from shortlinks.models import ShortURLModel
    >>> from shortlinks.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="shortlinks:dev")

    >>> short_url = ShortURLModel.new(
    ...     target="https://example.com/page",
    ...     shortcode="abc123",
    ...     validity_minutes=30,
    ...     now=datetime.now(UTC),
    ... )
    >>> dao.insert(short_url)
    <ShortURLRedisDAO>

    >>> dao.get("abc123").target
    'https://example.com/page'

    >>> dao.update(short_url.id, lambda current: replace(current, hits=current.hits + 1)).hits
    1
"""

import logging
from datetime import datetime
from typing import Any
from collections.abc import Callable

import redis
from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error, watched_transaction
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return value.decode('utf-8') if isinstance(value, bytes) else str(value)


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    Each record is a hash; writes which must not interleave with other writes
    to the same record (insert, update, delete) run as WATCH/MULTI/EXEC
    transactions on the record's hash key.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLRedisDAO:
            Store a record, its id index entry and its position in the listing index.
            Raises ShortURLAlreadyExistsError when a URL with the same shortcode exists.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a record by shortcode.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether a shortcode is taken.

        all(**kwargs) -> list[ShortURLModel]:
            Retrieve all records in insertion order.

        update(link_id: str, mutator: Callable, **kwargs) -> ShortURLModel:
            Atomically replace a record's hits with the mutator's result.
            Raises ShortURLNotFoundError when the id doesn't exist.

        delete(link_id: str, **kwargs) -> ShortURLRedisDAO:
            Delete a record and its index entries (no-op if absent).

        All methods raise DataStoreError on connectivity issues with Redis.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Insert a short URL record into Redis

        The existence check and the writes form one optimistic transaction
        on the record's hash key, so two concurrent inserts of the same
        shortcode can't both succeed.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        link_key = self.keys.link_key(short_url.shortcode)
        link_id_key = self.keys.link_id_key(short_url.id)
        link_index_key = self.keys.link_index_key()
        sequence = self._next_sequence()

        def _insert(pipe: redis.client.Pipeline) -> None:
            if pipe.exists(link_key):
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")

            # NOTE: The record hash, the id index and the listing index are written
            #       in a single MULTI/EXEC block. Readers never observe a record
            #       which can be listed but not deleted by id (or vice versa).
            pipe.multi()
            pipe.hset(link_key, mapping=self._to_mapping(short_url))
            pipe.set(link_id_key, short_url.shortcode)
            pipe.zadd(link_index_key, {short_url.shortcode: sequence})
            pipe.execute()

        watched_transaction(self.redis, link_key, _insert)
        logger.debug('Inserted short URL record.', extra={'shortcode': short_url.shortcode, 'linkId': short_url.id})
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL record by shortcode

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel:
                The retrieved ShortURLModel instance if found.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        fields = self.redis.hgetall(self.keys.link_key(shortcode))
        if not fields:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self._to_model(fields)

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    def all(self, **kwargs) -> list[ShortURLModel]:
        """Retrieve all records ordered by insertion

        Index entries whose hash vanished in between (concurrent delete) are skipped.
        """
        shortcodes = self.redis.zrange(self.keys.link_index_key(), 0, -1)
        if not shortcodes:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for shortcode in shortcodes:
                pipe.hgetall(self.keys.link_key(_text(shortcode)))
            rows = pipe.execute()

        return [self._to_model(fields) for fields in rows if fields]

    @handle_redis_connection_error
    @beartype
    def update(self, link_id: str, mutator: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        """Atomically apply a mutation to a stored record

        NOTE: The record's hash key is WATCHed while the current value is read
              and the mutator runs. If another client writes the record (e.g. a
              concurrent click or delete), EXEC fails and the whole read-mutate-write
              cycle restarts with fresh data, so no increment is ever lost:

              (lambda 1): WATCH links:codes:abc123 -> HGETALL => hits=4
              (lambda 2): WATCH links:codes:abc123 -> HGETALL => hits=4
              (lambda 2): MULTI -> HSET hits 5 -> EXEC          => OK
              (lambda 1): MULTI -> HSET hits 5 -> EXEC          => WatchError
              (lambda 1): WATCH links:codes:abc123 -> HGETALL => hits=5 -> ... EXEC => hits=6

        Args:
            link_id (str):
                Id of the record to update.
            mutator (Callable[[ShortURLModel], ShortURLModel]):
                Function producing the replacement record. Only hits may change.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel: The record as stored after the update.

        Raises:
            ShortURLNotFoundError:
                If no record has the given id.
            ValueError:
                If the mutator changed an immutable field.
            DataStoreError:
                If Redis connectivity issues occur or the transaction keeps conflicting.
        """
        shortcode = self.redis.get(self.keys.link_id_key(link_id))
        if shortcode is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
        link_key = self.keys.link_key(_text(shortcode))

        def _update(pipe: redis.client.Pipeline) -> ShortURLModel:
            fields = {_text(key): value for key, value in pipe.hgetall(link_key).items()}
            if not fields or _text(fields.get('id', '')) != link_id:
                raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

            current = self._to_model(fields)
            updated = mutator(current)
            self._check_mutation(current, updated)

            pipe.multi()
            pipe.hset(link_key, 'hits', updated.hits)
            pipe.execute()
            return updated

        return watched_transaction(self.redis, link_key, _update)

    @handle_redis_connection_error
    @beartype
    def delete(self, link_id: str, **kwargs) -> 'ShortURLRedisDAO':
        """Delete a record, its id index entry and its listing index entry

        Deleting an unknown id is a no-op.
        """
        link_id_key = self.keys.link_id_key(link_id)
        shortcode = self.redis.get(link_id_key)
        if shortcode is None:
            return self
        shortcode = _text(shortcode)
        link_key = self.keys.link_key(shortcode)

        def _delete(pipe: redis.client.Pipeline) -> None:
            owner = pipe.hget(link_key, 'id')
            pipe.multi()
            # The shortcode may have been deleted and claimed by another record in between
            if owner is not None and _text(owner) == link_id:
                pipe.delete(link_key)
                pipe.zrem(self.keys.link_index_key(), shortcode)
            pipe.delete(link_id_key)
            pipe.execute()

        watched_transaction(self.redis, link_key, _delete)
        logger.debug('Deleted short URL record.', extra={'shortcode': shortcode, 'linkId': link_id})
        return self

    def _next_sequence(self) -> int:
        """INCR the insertion counter; its value scores the record in the listing index"""
        return int(self.redis.incr(self.keys.counter_key()))

    @staticmethod
    def _to_mapping(short_url: ShortURLModel) -> dict[str, str | int]:
        return {
            'id': short_url.id,
            'target': short_url.target,
            'shortcode': short_url.shortcode,
            'validity_minutes': short_url.validity_minutes,
            'created_at': short_url.created_at.isoformat(),
            'expires_at': short_url.expires_at.isoformat(),
            'hits': short_url.hits,
        }

    @staticmethod
    def _to_model(fields: dict[Any, Any]) -> ShortURLModel:
        fields = {_text(key): _text(value) for key, value in fields.items()}
        return ShortURLModel(
            id=fields['id'],
            target=fields['target'],
            shortcode=fields['shortcode'],
            validity_minutes=int(fields['validity_minutes']),
            created_at=datetime.fromisoformat(fields['created_at']),
            expires_at=datetime.fromisoformat(fields['expires_at']),
            hits=int(fields.get('hits', 0)),
        )
