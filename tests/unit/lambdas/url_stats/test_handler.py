import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch
from freezegun import freeze_time

from shortlinks.lambdas.url_stats import app
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import DataStoreError


@pytest.fixture(autouse=True)
def _patch_lambda_dependencies(patch_app) -> None:
    patch_app(app)


@freeze_time('2025-10-15 12:00:00')
def test_lambda_handler(context, short_url_dao, make_record):
    short_url_dao.insert(make_record('first1', validity_minutes=60, age=timedelta(minutes=10), hits=3))
    short_url_dao.insert(make_record('second', validity_minutes=60, age=timedelta(hours=2), hits=0))
    short_url_dao.insert(make_record('third3', validity_minutes=600, age=timedelta(hours=3), hits=7))

    response = app.lambda_handler({}, context)
    body = json.loads(response['body'])

    assert response['statusCode'] == 200
    assert body['stats'] == {
        'total_urls': 3,
        'active_urls': 2,
        'expired_urls': 1,
        'total_clicks': 10,
        'average_clicks': 3.33,
    }
    assert body['urls'] == [
        {'shortcode': 'first1', 'hits': 3, 'status': 'active', 'click_rate': 3.0, 'time_remaining': '50m'},
        {'shortcode': 'second', 'hits': 0, 'status': 'expired', 'click_rate': 0.0, 'time_remaining': 'Expired'},
        {'shortcode': 'third3', 'hits': 7, 'status': 'active', 'click_rate': 2.33, 'time_remaining': '7h 0m'},
    ]


def test_lambda_handler_without_records(context):
    response = app.lambda_handler({}, context)
    body = json.loads(response['body'])

    assert response['statusCode'] == 200
    assert body['stats'] == {'total_urls': 0, 'active_urls': 0, 'expired_urls': 0, 'total_clicks': 0, 'average_clicks': 0}
    assert body['urls'] == []


def test_lambda_handler_with_unavailable_data_store(monkeypatch: MonkeyPatch, context):
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.all.side_effect = DataStoreError('Connection refused')
    monkeypatch.setattr(app, 'dao_from_config', lambda *a, **kw: dao)

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 503
    assert json.loads(response['body'])['error_code'] == 'storage:unavailable'
