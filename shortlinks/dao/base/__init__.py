from shortlinks.dao.base.short_url_base_dao import ShortURLBaseDAO, MUTABLE_FIELDS


__all__ = [
    'ShortURLBaseDAO',
    'MUTABLE_FIELDS',
]
