import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing short URL records.

    Layout:
        links:codes:<shortcode> -> HASH with the record's fields
        links:ids:<id>         -> STRING shortcode owning the record id
        links:index            -> ZSET of shortcodes scored by insertion sequence
        links:counter          -> STRING global insertion sequence

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "shortlinks:prod" or "shortlinks:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, shortcode: str) -> str:
        return f'links:codes:{shortcode}'

    @prefix_key
    def link_id_key(self, link_id: str) -> str:
        return f'links:ids:{link_id}'

    @prefix_key
    def link_index_key(self) -> str:
        return 'links:index'

    @prefix_key
    def counter_key(self) -> str:
        return 'links:counter'
