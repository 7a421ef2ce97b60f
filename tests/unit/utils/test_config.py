"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Lambda section extraction
   - Ensures extract_lambda_config() selects the active backend and the shared settings.
   - Ensures malformed documents raise BadConfigurationError.

3. Configuration loading behavior
   - Ensures load_config() correctly returns parsed AppConfig configuration data.
   - Ensures load_config() raises ClientError when AppConfig calls fail.
   - Ensures missing AppConfig identifiers raise MissingEnvironmentVariableError.
   - Ensures a local AppConfig agent is used when running under SAM.

4. Shortener settings
   - Ensures defaults, overrides and validation of the "settings" block.
"""

import os
import json
from io import BytesIO
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
import botocore

from shortlinks.utils import config
from shortlinks.constants import Defaults
from shortlinks.exceptions import BadConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')
    monkeypatch.delenv('APPCONFIG_AGENT_URL', raising=False)


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'settings': {
            'base_url': 'https://sho.rt',
            'active_link_quota': 3,
        },
        'configs': {
            'test_lambda': {
                'redis': {
                    'host': 'monkey',
                    'port': 659595,
                    'db': 3
                },
                'memory': {}
            }
        },
    }
    # fmt: on


@pytest.fixture
def appconfig_client(monkeypatch, appconfig_payload):
    """Mock AppConfig Data client serving appconfig_payload"""
    monkey_bytes = BytesIO(json.dumps(appconfig_payload).encode('utf-8'))
    mock_appconfig = MagicMock()
    mock_appconfig.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    mock_appconfig.get_latest_configuration.return_value = {'Configuration': monkey_bytes}
    monkeypatch.setattr(config.boto3, 'client', lambda service: mock_appconfig)
    return mock_appconfig


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the correct environment value from APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Test')
    assert config.app_env() == 'test'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delitem(os.environ, 'APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    """Ensure app_name() returns the correct environment value from APP_NAME"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    assert config.app_name() == 'test-app'


def test_app_name_not_set(monkeypatch):
    """Ensure app_name() returns None when APP_NAME is not set"""
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_name() is None
    assert config.app_prefix() is None


def test_app_prefix(monkeypatch):
    """Ensure app_prefix() combines APP_NAME and APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'test')
    assert config.app_prefix() == 'test-app:test'


# -------------------------------
# 2. Lambda section extraction
# -------------------------------


def test_extract_lambda_config(appconfig_payload):
    result = config.extract_lambda_config(appconfig_payload, 'test_lambda')

    assert result == {
        'active_backend': 'redis',
        'redis': {'host': 'monkey', 'port': 659595, 'db': 3},
        'settings': {'base_url': 'https://sho.rt', 'active_link_quota': 3},
    }


def test_extract_lambda_config_without_settings(appconfig_payload):
    del appconfig_payload['settings']
    appconfig_payload['active_backend'] = 'memory'

    result = config.extract_lambda_config(appconfig_payload, 'test_lambda')

    assert result == {'active_backend': 'memory', 'memory': {}, 'settings': {}}


@pytest.mark.parametrize(
    'document',
    [
        {},
        {'active_backend': 'redis'},
        {'active_backend': 'redis', 'configs': {}},
        {'active_backend': 'redis', 'configs': {'test_lambda': {'memory': {}}}},
        {'active_backend': 'redis', 'configs': None},
    ],
)
def test_extract_lambda_config_with_malformed_document(document):
    with pytest.raises(BadConfigurationError, match="no 'test_lambda' configuration"):
        config.extract_lambda_config(document, 'test_lambda')


# -------------------------------
# 3. Configuration loading behavior
# -------------------------------


def test_load_config(appconfig_client):
    """Ensure load_config() pulls the document from AppConfig and selects the lambda's section."""
    result = config.load_config('test_lambda')

    assert result['active_backend'] == 'redis'
    assert result['redis']['host'] == 'monkey'
    assert result['redis']['port'] == 659595
    assert result['redis']['db'] == 3
    assert result['settings']['base_url'] == 'https://sho.rt'

    appconfig_client.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    appconfig_client.get_latest_configuration.assert_called_once_with(
        ConfigurationToken='monkey_token',
    )


def test_missing_appconfig_raises_error(monkeypatch):
    """Ensure load_config() propagates ClientError when AppConfig returns an error."""
    mock_appconfig = MagicMock()
    mock_appconfig.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )
    monkeypatch.setattr(config.boto3, 'client', lambda service: mock_appconfig)

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_config('test_lambda')


def test_load_config_with_missing_identifiers(monkeypatch, appconfig_client):
    monkeypatch.delenv('APPCONFIG_ENV_ID')

    with pytest.raises(MissingEnvironmentVariableError, match="'APPCONFIG_ENV_ID'"):
        config.load_config('test_lambda')

    appconfig_client.start_configuration_session.assert_not_called()


def test_load_config_from_local_agent(monkeypatch, appconfig_payload, appconfig_client):
    """Ensure the local AppConfig agent is queried when running under SAM."""
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APP_NAME', 'shortlinks')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://host.docker.internal:2772')
    requested = []

    @contextmanager
    def fake_urlopen(url, timeout):
        requested.append(url)
        yield BytesIO(json.dumps(appconfig_payload).encode('utf-8'))

    monkeypatch.setattr(config.urllib.request, 'urlopen', fake_urlopen)

    result = config.load_config('test_lambda')

    assert result['redis']['host'] == 'monkey'
    assert requested == [
        'http://host.docker.internal:2772/applications/shortlinks/environments/local/configurations/backend-config'
    ]
    appconfig_client.start_configuration_session.assert_not_called()


@pytest.mark.parametrize(
    'agent_url',
    [
        'file:///etc/passwd',
        'http://evil.example.com:2772',
        'http://localhost:8080',
    ],
)
def test_load_config_rejects_unsafe_agent_url(monkeypatch, agent_url):
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', agent_url)

    with pytest.raises(BadConfigurationError):
        config.load_config('test_lambda')


# -------------------------------
# 4. Shortener settings
# -------------------------------


def test_settings_defaults():
    settings = config.ShortenerSettings.from_config({})

    assert settings.base_url is None
    assert settings.active_link_quota == Defaults.ACTIVE_LINK_QUOTA == 5
    assert settings.max_generation_attempts == Defaults.MAX_GENERATION_ATTEMPTS == 100
    assert settings.default_validity_minutes == Defaults.VALIDITY_MINUTES == 30
    assert settings.expired_retention_minutes == Defaults.EXPIRED_RETENTION_MINUTES


def test_settings_overrides(appconfig_payload):
    lambda_config = config.extract_lambda_config(appconfig_payload, 'test_lambda')
    settings = config.ShortenerSettings.from_config(lambda_config)

    assert settings.base_url == 'https://sho.rt'
    assert settings.active_link_quota == 3


def test_settings_reject_unknown_keys():
    with pytest.raises(BadConfigurationError, match='Unknown settings: link_quota'):
        config.ShortenerSettings.from_config({'settings': {'link_quota': 5}})


@pytest.mark.parametrize(
    'settings',
    [
        {'base_url': 42},
        {'active_link_quota': 0},
        {'active_link_quota': '5'},
        {'active_link_quota': True},
        {'max_generation_attempts': -1},
        {'default_validity_minutes': 0},
        {'default_validity_minutes': 10_081},
        {'default_validity_minutes': 30.5},
        {'expired_retention_minutes': -1},
    ],
)
def test_settings_reject_bad_values(settings):
    with pytest.raises(BadConfigurationError):
        config.ShortenerSettings.from_config({'settings': settings})
