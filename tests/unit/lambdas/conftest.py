from dataclasses import replace
from datetime import datetime, timedelta, UTC
from typing import cast
from collections.abc import Callable
from types import ModuleType

import pytest
from pytest import MonkeyPatch

from shortlinks.types import LambdaContext, LambdaConfiguration
from shortlinks.models import ShortURLModel
from shortlinks.dao.memory import ShortURLMemoryDAO


NOW = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _env(monkeypatch: MonkeyPatch) -> None:
    # guarantee_500_response re-raises when running locally
    monkeypatch.delenv('APP_ENV', raising=False)
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'test'})


@pytest.fixture
def config() -> LambdaConfiguration:
    return cast(LambdaConfiguration, {'active_backend': 'memory', 'memory': {}, 'settings': {}})


@pytest.fixture
def short_url_dao() -> ShortURLMemoryDAO:
    return ShortURLMemoryDAO()


@pytest.fixture
def patch_app(monkeypatch: MonkeyPatch, config: LambdaConfiguration, short_url_dao: ShortURLMemoryDAO) -> Callable[[ModuleType], None]:
    """Point a handler module at the test config and DAO"""

    def _patch(app: ModuleType) -> None:
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'dao_from_config', lambda *a, **kw: short_url_dao)

    return _patch


@pytest.fixture
def make_record() -> Callable[..., ShortURLModel]:
    """Build a record created `age` before NOW"""

    def _make(shortcode: str, *, validity_minutes: int = 60, age: timedelta = timedelta(0), hits: int = 0) -> ShortURLModel:
        record = ShortURLModel.new(
            target=f'https://example.com/{shortcode}',
            shortcode=shortcode,
            validity_minutes=validity_minutes,
            now=NOW - age,
        )
        return replace(record, hits=hits)

    return _make
