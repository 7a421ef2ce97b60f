import functools
import logging
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from shortlinks.constants import MAX_TRANSACTION_RETRIES
from shortlinks.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])
T = TypeVar('T')

logger = logging.getLogger(__name__)


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.ConnectionError
            or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get_count(self):
        ...     return self.redis.get('count')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            info = self.redis.connection_pool.connection_kwargs
            redis_host = info.get('host')
            redis_port = info.get('port')
            redis_db = info.get('db')
            raise DataStoreError(f"Can't connect to Redis at {redis_host}:{redis_port}/{redis_db}.") from e

    return wrapper


def watched_transaction[T](client: redis.Redis, key: str, body: Callable[[redis.client.Pipeline], T]) -> T:
    """Run an optimistic WATCH/MULTI/EXEC transaction guarding a single key

    `body` receives a pipeline which is already watching `key`. It may read
    in immediate mode, must call `pipe.multi()` before queueing writes and
    `pipe.execute()` to commit. If another client modifies `key` in between,
    EXEC fails with WatchError and `body` runs again from scratch.

    Exceptions raised by `body` (other than WatchError) abort the transaction
    and propagate unchanged.

    Args:
        client (redis.Redis):
            Redis client to open the pipeline on.
        key (str):
            Key to WATCH.
        body (Callable[[Pipeline], T]):
            Transaction body.

    Returns:
        T: Whatever `body` returns on the successful attempt.

    Raises:
        DataStoreError:
            If the transaction keeps conflicting after MAX_TRANSACTION_RETRIES attempts.

    Example:
        >>> def increment(pipe):
        ...     value = int(pipe.get('counter') or 0)
        ...     pipe.multi()
        ...     pipe.set('counter', value + 1)
        ...     pipe.execute()
        ...     return value + 1
        >>> watched_transaction(client, 'counter', increment)
        1
    """
    with client.pipeline(transaction=True) as pipe:
        for attempt in range(1, MAX_TRANSACTION_RETRIES + 1):
            try:
                pipe.watch(key)
                return body(pipe)
            except redis.exceptions.WatchError:
                logger.debug('Concurrent modification of %s, retrying transaction.', key, extra={'attempt': attempt})
                pipe.reset()

    raise DataStoreError(f'Gave up on Redis transaction for {key} after {MAX_TRANSACTION_RETRIES} conflicting attempts.')
