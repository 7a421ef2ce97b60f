"""Read-only aggregation over short URL records

Functions:
    summarize(records, now) -> LinkStats
        Totals over a collection of records.
    click_rate(record, now) -> float
        Clicks per hour since creation.
    time_remaining(record, now) -> timedelta
        Exact time left until the record expires (negative once expired).
    format_time_remaining(record, now) -> str
        Human-readable remaining time ('2d 3h', '4h 15m', '9m' or 'Expired').
    record_metrics(record, now) -> RecordMetrics
        Per-record status, click rate and remaining time in one bundle.

Example:
    >>> stats = summarize(records, now)
    >>> stats.total_clicks, stats.average_clicks
    (10, 3.33)
"""

import math
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from collections.abc import Iterable

from shortlinks.constants import EXPIRED_LABEL
from shortlinks.models import ShortURLModel, LinkStatus


_CENTS = Decimal('0.01')


def _round2(value: float | int) -> float:
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class LinkStats:
    total_urls: int = 0
    active_urls: int = 0
    expired_urls: int = 0
    total_clicks: int = 0
    average_clicks: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RecordMetrics:
    status: LinkStatus
    click_rate: float
    time_remaining: str

    def to_dict(self) -> dict:
        return {'status': str(self.status), 'click_rate': self.click_rate, 'time_remaining': self.time_remaining}


def summarize(records: Iterable[ShortURLModel], now: datetime) -> LinkStats:
    """Aggregate totals over `records` as of `now`

    `average_clicks` is rounded half-up to two decimals and is 0 for an empty collection.
    """
    records = list(records)
    total_urls = len(records)
    active_urls = sum(1 for record in records if not record.is_expired(now))
    total_clicks = sum(record.hits for record in records)
    average_clicks = _round2(total_clicks / total_urls) if total_urls else 0.0

    return LinkStats(
        total_urls=total_urls,
        active_urls=active_urls,
        expired_urls=total_urls - active_urls,
        total_clicks=total_clicks,
        average_clicks=average_clicks,
    )


def click_rate(record: ShortURLModel, now: datetime) -> float:
    """Clicks per hour, counting at least one full hour since creation"""
    hours_active = max(1, math.floor((now - record.created_at).total_seconds() / 3600))
    return _round2(record.hits / hours_active)


def time_remaining(record: ShortURLModel, now: datetime) -> timedelta:
    return record.expires_at - now


def format_time_remaining(record: ShortURLModel, now: datetime) -> str:
    """Render remaining validity with the two most significant units

    Example:
        >>> format_time_remaining(record, record.expires_at - timedelta(hours=27, minutes=5))
        '1d 3h'
        >>> format_time_remaining(record, record.expires_at)
        'Expired'
    """
    remaining = time_remaining(record, now)
    if remaining <= timedelta(0):
        return EXPIRED_LABEL

    minutes = math.floor(remaining.total_seconds() / 60)
    hours, days = minutes // 60, minutes // (60 * 24)

    if days > 0:
        return f'{days}d {hours % 24}h'
    if hours > 0:
        return f'{hours}h {minutes % 60}m'
    return f'{minutes}m'


def record_metrics(record: ShortURLModel, now: datetime) -> RecordMetrics:
    return RecordMetrics(
        status=record.status(now),
        click_rate=click_rate(record, now),
        time_remaining=format_time_remaining(record, now),
    )
