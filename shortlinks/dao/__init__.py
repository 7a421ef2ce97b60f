from shortlinks.dao.factory import dao_from_config


__all__ = [
    'dao_from_config',
]
