"""Unit tests for Redis DAO helpers.

Test coverage includes:
    1. handle_redis_connection_error
       - Normal execution passes the result through.
       - Redis connection and timeout errors become DataStoreError.
       - functools.wraps preserves the original function's metadata.
    2. watched_transaction
       - The body runs on a pipeline watching the key.
       - WatchError restarts the body with a reset pipeline.
       - Persistent conflicts raise DataStoreError after MAX_TRANSACTION_RETRIES attempts.
       - Errors raised by the body propagate unchanged.
"""

from unittest.mock import MagicMock

import pytest
import redis

from shortlinks.constants import MAX_TRANSACTION_RETRIES
from shortlinks.dao.redis.helpers import handle_redis_connection_error, watched_transaction
from shortlinks.dao.exceptions import DataStoreError


class DummyDAO:
    def __init__(self):
        self.redis = MagicMock()
        self.redis.connection_pool.connection_kwargs = {
            'host': 'localhost',
            'port': 6379,
            'db': 0,
        }

    @handle_redis_connection_error
    def ping(self):
        return 'OK'

    @handle_redis_connection_error
    def fail(self, error):
        raise error


@pytest.fixture
def pipe():
    return MagicMock(spec=redis.client.Pipeline)


@pytest.fixture
def client(pipe):
    _client = MagicMock(spec=redis.Redis)
    _client.pipeline.return_value.__enter__.return_value = pipe
    return _client


# -------------------------------
# 1. handle_redis_connection_error
# -------------------------------


def test_decorator_allows_normal_execution():
    """Ensure the wrapped function executes normally when no error occurs."""
    assert DummyDAO().ping() == 'OK'


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ConnectionError('Cannot connect'),
        redis.exceptions.TimeoutError('Timed out'),
    ],
)
def test_decorator_transforms_redis_connection_error(error):
    """Ensure Redis connectivity errors are caught and re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match="Can't connect to Redis at localhost:6379/0."):
        DummyDAO().fail(error)


def test_decorator_ignores_other_errors():
    with pytest.raises(KeyError):
        DummyDAO().fail(KeyError('missing'))


def test_decorator_preserves_function_metadata():
    """Ensure function name and docstring are preserved via functools.wraps."""

    @handle_redis_connection_error
    def sample_function():
        """This is a sample docstring."""
        return 'OK'

    assert sample_function.__name__ == 'sample_function'
    assert 'sample docstring' in sample_function.__doc__


# -------------------------------
# 2. watched_transaction
# -------------------------------


def test_watched_transaction_returns_body_result(client, pipe):
    result = watched_transaction(client, 'links:codes:abc123', lambda p: 'done')

    assert result == 'done'
    client.pipeline.assert_called_once_with(transaction=True)
    pipe.watch.assert_called_once_with('links:codes:abc123')
    pipe.reset.assert_not_called()


def test_watched_transaction_retries_on_watch_error(client, pipe):
    body = MagicMock(side_effect=[redis.exceptions.WatchError(), redis.exceptions.WatchError(), 42])

    assert watched_transaction(client, 'links:codes:abc123', body) == 42
    assert body.call_count == 3
    assert pipe.watch.call_count == 3
    assert pipe.reset.call_count == 2


def test_watched_transaction_gives_up_after_max_retries(client, pipe):
    body = MagicMock(side_effect=redis.exceptions.WatchError())

    with pytest.raises(DataStoreError, match='Gave up on Redis transaction for links:codes:abc123'):
        watched_transaction(client, 'links:codes:abc123', body)

    assert body.call_count == MAX_TRANSACTION_RETRIES


def test_watched_transaction_propagates_body_errors(client, pipe):
    body = MagicMock(side_effect=ValueError('rejected'))

    with pytest.raises(ValueError, match='rejected'):
        watched_transaction(client, 'links:codes:abc123', body)

    body.assert_called_once()
