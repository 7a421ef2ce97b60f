"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`) and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "settings": {
            "base_url": "https://sho.rt",
            "active_link_quota": 5,
            "max_generation_attempts": 100,
            "default_validity_minutes": 30,
            "expired_retention_minutes": 10080
        },
        "configs": {
            "shorten_url": {
                "redis": { ... }
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this
AppConfig document, together with the shared `"settings"` block.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config(lambda_name: str) -> dict
        Load configuration for a given Lambda from AWS AppConfig (or from a
        local AppConfig agent under SAM).

Classes:
    ShortenerSettings
        Validated view over the `"settings"` block.

Example:
    Typical usage inside a Lambda handler:

        >>> from shortlinks.utils.config import load_config, ShortenerSettings
        >>> config = load_config('shorten_url')
        >>> config['active_backend']
        'redis'
        >>> config['redis']['host']
        'redis-15501.host.docker.internal'
        >>> ShortenerSettings.from_config(config).active_link_quota
        5
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from typing import Any
from collections.abc import Callable

import boto3

from shortlinks.constants import ENV, Defaults, Limits
from shortlinks.exceptions import BadConfigurationError
from shortlinks.types import AppConfig, AppConfigDataClient, LambdaConfiguration
from shortlinks.utils.helpers import require_environment
from shortlinks.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlinks'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlinks:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def extract_lambda_config(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Select the active backend section of one lambda from a full AppConfig document

    Args:
        document (dict):
            Full AppConfig document.
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url").

    Returns:
        dict: {"active_backend": <name>, <name>: {...}, "settings": {...}}

    Raises:
        BadConfigurationError:
            If the document lacks the active backend or the lambda's section.
    """
    try:
        backend = document['active_backend']
        backend_config = document['configs'][lambda_name][backend]
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no '{lambda_name}' configuration for the active backend.") from e

    return {
        'active_backend': backend,
        backend: backend_config or {},
        'settings': document.get('settings') or {},
    }


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        data = extract_lambda_config(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


def _appconfig_client() -> AppConfigDataClient:
    return boto3.client('appconfigdata')


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The lambda's config section as a Python dictionary.

    Raises:
        MissingEnvironmentVariableError:
            If one of the AppConfig identifiers is not set.
        BadConfigurationError:
            If the document lacks the lambda's section.
        botocore.exceptions.ClientError:
            If AppConfig rejects the request.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = _appconfig_client()

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    data = extract_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data


@dataclass(frozen=True)
class ShortenerSettings:
    """Service-wide settings shared by all lambdas.

    Attributes:
        base_url (str | None):
            Public origin used to render short URLs. None derives it from the request.
        active_link_quota (int):
            Maximum number of simultaneously active links.
        max_generation_attempts (int):
            Random shortcode draws before failing with CodeSpaceExhaustedError.
        default_validity_minutes (int):
            Validity used when a shorten request doesn't specify one.
        expired_retention_minutes (int):
            How long expired links are kept before the purge sweep deletes them.
    """

    base_url: str | None = None
    active_link_quota: int = Defaults.ACTIVE_LINK_QUOTA
    max_generation_attempts: int = Defaults.MAX_GENERATION_ATTEMPTS
    default_validity_minutes: int = Defaults.VALIDITY_MINUTES
    expired_retention_minutes: int = Defaults.EXPIRED_RETENTION_MINUTES

    @classmethod
    def from_config(cls, app_config: dict[str, Any]) -> 'ShortenerSettings':
        """Build settings from the `settings` block of a lambda configuration

        Raises:
            BadConfigurationError: On unknown keys or out-of-range values.
        """
        raw = dict(app_config.get('settings') or {})
        unknown = set(raw) - set(cls.__dataclass_fields__)
        if unknown:
            raise BadConfigurationError(f'Unknown settings: {", ".join(sorted(unknown))}')

        settings = cls(**raw)
        settings._validate()
        return settings

    def _validate(self) -> None:
        if self.base_url is not None and not isinstance(self.base_url, str):
            raise BadConfigurationError(f'base_url must be a string (given type: {type(self.base_url)}).')

        # fmt: off
        positive_ints = {
            'active_link_quota': self.active_link_quota,
            'max_generation_attempts': self.max_generation_attempts,
        }
        # fmt: on
        for name, value in positive_ints.items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')

        validity = self.default_validity_minutes
        if not isinstance(validity, int) or isinstance(validity, bool) or not Limits.MIN_VALIDITY_MINUTES <= validity <= Limits.MAX_VALIDITY_MINUTES:
            raise BadConfigurationError(
                f'default_validity_minutes must be between {Limits.MIN_VALIDITY_MINUTES} and {Limits.MAX_VALIDITY_MINUTES} (given value: {validity!r}).'
            )

        retention = self.expired_retention_minutes
        if not isinstance(retention, int) or isinstance(retention, bool) or retention < 0:
            raise BadConfigurationError(f'expired_retention_minutes must be a non-negative integer (given value: {retention!r}).')
