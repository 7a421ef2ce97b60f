from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.redis.short_url_redis_dao import ShortURLRedisDAO
from shortlinks.dao.redis.mixins import RedisClientMixin


__all__ = [
    'RedisKeySchema',
    'ShortURLRedisDAO',
    'RedisClientMixin',
]
