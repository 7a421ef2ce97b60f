"""Unit tests for the ShortURLModel dataclass in short_url_model.py.

This test suite verifies creation, expiry evaluation and immutability of
ShortURLModel, the single record type of the service.

Test coverage includes:

1. Model creation
   - new() assigns a fresh id, zero hits and expires_at = created_at + validity.

2. Expiry evaluation
   - A record is Active up to and including expires_at, Expired strictly after.
   - Without an explicit time the current UTC time is used.

3. Equality semantics
   - Models with identical data compare equal, differing ones don't.

4. Immutability
   - All fields are frozen and cannot be reassigned after creation.
"""

from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timedelta, UTC

import pytest
from freezegun import freeze_time

from shortlinks.models import ShortURLModel, LinkStatus


NOW = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def short_url() -> ShortURLModel:
    return ShortURLModel.new(target='https://example.com/article/123', shortcode='abc123', validity_minutes=30, now=NOW)


# -------------------------------------------------
# 1. Model creation
# -------------------------------------------------


def test_new_short_url(short_url):
    assert short_url.target == 'https://example.com/article/123'
    assert short_url.shortcode == 'abc123'
    assert short_url.validity_minutes == 30
    assert short_url.created_at == NOW
    assert short_url.expires_at == datetime(2025, 10, 15, 12, 30, tzinfo=UTC)
    assert short_url.hits == 0
    assert len(short_url.id) == 32


@pytest.mark.parametrize('validity_minutes', [1, 30, 1440, 10_080])
def test_expires_at_is_exact(validity_minutes):
    short_url = ShortURLModel.new(target='https://example.com', shortcode='', validity_minutes=validity_minutes, now=NOW)
    assert short_url.expires_at - short_url.created_at == timedelta(minutes=validity_minutes)


def test_new_assigns_unique_ids():
    ids = {ShortURLModel.new('https://example.com', 'abc123', 30, NOW).id for _ in range(100)}
    assert len(ids) == 100


# -------------------------------------------------
# 2. Expiry evaluation
# -------------------------------------------------


@pytest.mark.parametrize(
    'offset, expired',
    [
        (timedelta(minutes=-1), False),
        (timedelta(0), False),
        (timedelta(microseconds=1), True),
        (timedelta(days=3), True),
    ],
)
def test_is_expired(short_url, offset, expired):
    now = short_url.expires_at + offset
    assert short_url.is_expired(now) is expired
    assert short_url.status(now) == (LinkStatus.EXPIRED if expired else LinkStatus.ACTIVE)


def test_is_expired_defaults_to_current_time(short_url):
    with freeze_time(short_url.expires_at - timedelta(seconds=1)):
        assert not short_url.is_expired()
    with freeze_time(short_url.expires_at + timedelta(seconds=1)):
        assert short_url.is_expired()


def test_status_values():
    assert LinkStatus.ACTIVE == 'active'
    assert LinkStatus.EXPIRED == 'expired'


# -------------------------------------------------
# 3. Equality semantics
# -------------------------------------------------


def test_equality(short_url):
    assert short_url == replace(short_url)
    assert short_url != replace(short_url, hits=1)
    assert short_url != replace(short_url, target='https://example.com/other')


# -------------------------------------------------
# 4. Immutability
# -------------------------------------------------


@pytest.mark.parametrize('field, value', [('target', 'https://evil.example'), ('shortcode', 'zzz999'), ('hits', 5)])
def test_short_url_is_frozen(short_url, field, value):
    with pytest.raises(FrozenInstanceError):
        setattr(short_url, field, value)
