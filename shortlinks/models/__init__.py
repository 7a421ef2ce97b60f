from shortlinks.models.short_url_model import ShortURLModel, LinkStatus


__all__ = [
    'ShortURLModel',
    'LinkStatus',
]
