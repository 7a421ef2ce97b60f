"""Unit tests for the RedisKeySchema class in redis_key_schema.py.

This test suite verifies the correctness, consistency, and safety of
Redis key generation supplied by RedisKeySchema.

Test coverage includes:

1. Record keys
   - link_key() and link_id_key() embed the shortcode / id.

2. Collection keys
   - link_index_key() and counter_key() are fixed names.

3. Prefix behavior
   - Keys are prefixed only when a prefix is provided.

4. Key isolation
   - No shortcode produces the same key as the index or the counter.

5. Invalid prefix types
   - Ensures improper prefix types raise TypeError.
"""

import pytest

from shortlinks.dao.redis.redis_key_schema import RedisKeySchema


# -------------------------------
# 1. Record keys
# -------------------------------


@pytest.mark.parametrize(
    'shortcode, expected',
    [
        ('abc123', 'links:codes:abc123'),
        ('XyZ789', 'links:codes:XyZ789'),
    ],
)
def test_link_key(shortcode, expected):
    """Ensure link_key() generates valid Redis keys."""
    keys = RedisKeySchema()
    assert keys.link_key(shortcode) == expected


def test_link_id_key():
    """Ensure link_id_key() generates valid Redis keys."""
    keys = RedisKeySchema()
    assert keys.link_id_key('0f8e2b6c') == 'links:ids:0f8e2b6c'


# -------------------------------
# 2. Collection keys
# -------------------------------


def test_collection_keys():
    keys = RedisKeySchema()
    assert keys.link_index_key() == 'links:index'
    assert keys.counter_key() == 'links:counter'


# -------------------------------
# 3. Prefix behavior
# -------------------------------


@pytest.mark.parametrize(
    'prefix, expected_link_key, expected_counter_key',
    [
        ('testprefix', 'testprefix:links:codes:abc123', 'testprefix:links:counter'),
        ('shortlinks:dev', 'shortlinks:dev:links:codes:abc123', 'shortlinks:dev:links:counter'),
        (None, 'links:codes:abc123', 'links:counter'),
    ],
)
def test_key_prefixing(prefix, expected_link_key, expected_counter_key):
    """Ensure keys are correctly prefixed when a prefix is provided."""
    keys = RedisKeySchema(prefix=prefix)
    assert keys.link_key('abc123') == expected_link_key
    assert keys.counter_key() == expected_counter_key


# -------------------------------
# 4. Key isolation
# -------------------------------


@pytest.mark.parametrize('shortcode', ['index', 'counter', 'ids'])
def test_shortcodes_never_collide_with_collection_keys(shortcode):
    keys = RedisKeySchema(prefix='app:test')
    assert keys.link_key(shortcode) not in {keys.link_index_key(), keys.counter_key()}


# -------------------------------
# 5. Invalid prefix types
# -------------------------------


@pytest.mark.parametrize('prefix', [123, -1, 45.6, [], {}])
def test_invalid_prefix_type_raises_error(prefix):
    """Ensure invalid prefix types raise a TypeError."""
    with pytest.raises(TypeError):
        RedisKeySchema(prefix=prefix)
