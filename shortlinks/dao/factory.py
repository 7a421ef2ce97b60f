"""Build the short URL DAO selected by a lambda configuration

The lambda configuration (see shortlinks.utils.config.load_config) names the
active backend and carries its connection parameters:

    {
        "active_backend": "redis",
        "redis": {"host": "redis.internal", "port": 6379, "db": 0},
        "settings": {...}
    }

Supported backends:
    redis  - ShortURLRedisDAO, parameters are passed as redis_<name> keyword arguments.
    memory - ShortURLMemoryDAO, one store per key prefix and process.

Example:
    >>> dao = dao_from_config({'active_backend': 'memory', 'memory': {}})
    >>> dao is dao_from_config({'active_backend': 'memory', 'memory': {}})
    True
"""

import logging
import threading
from typing import Any

from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.dao.memory import ShortURLMemoryDAO
from shortlinks.exceptions import BadConfigurationError
from shortlinks.utils.config import app_prefix


__all__ = ['dao_from_config', 'BACKENDS']

BACKENDS = ('redis', 'memory')

logger = logging.getLogger(__name__)

_memory_stores: dict[str | None, ShortURLMemoryDAO] = {}
_memory_stores_lock = threading.Lock()


def _memory_dao(prefix: str | None) -> ShortURLMemoryDAO:
    with _memory_stores_lock:
        if prefix not in _memory_stores:
            _memory_stores[prefix] = ShortURLMemoryDAO()
        return _memory_stores[prefix]


def dao_from_config(app_config: dict[str, Any], prefix: str | None = None) -> ShortURLBaseDAO:
    """Create the DAO for the configured backend

    Args:
        app_config (dict):
            Lambda configuration with 'active_backend' and the backend's section.
        prefix (str | None):
            Key namespace. Defaults to app_prefix() (<APP_NAME>:<APP_ENV>).

    Returns:
        ShortURLBaseDAO: ready-to-use DAO instance.

    Raises:
        BadConfigurationError:
            If the active backend is unknown.
        DataStoreError:
            If the Redis healthcheck fails.
    """
    backend = app_config.get('active_backend', 'redis')
    prefix = prefix if prefix is not None else app_prefix()

    if backend == 'redis':
        redis_config = {f'redis_{k}': v for k, v in (app_config.get('redis') or {}).items()}
        logger.debug('Using Redis as the backend database for short URLs.', extra={'prefix': prefix})
        return ShortURLRedisDAO(**redis_config, prefix=prefix)

    if backend == 'memory':
        logger.debug('Using in-process memory as the backend database for short URLs.', extra={'prefix': prefix})
        return _memory_dao(prefix)

    raise BadConfigurationError(f"Unknown backend '{backend}' (expected one of: {', '.join(BACKENDS)}).")
