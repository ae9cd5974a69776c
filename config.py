"""Configuration read from the environment once per process."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple, Union

DEFAULT_TWEETS_URL = "https://api.twitter.com/2/tweets"
DEFAULT_STATUS_URL = "https://twitter.com/i/web/status/{id}"
DEFAULT_TIMEOUT = 10
DEFAULT_PORT = 3000

OAUTH1_VARIABLES = (
    "TWITTER_API_KEY",
    "TWITTER_API_SECRET",
    "TWITTER_ACCESS_TOKEN",
    "TWITTER_ACCESS_TOKEN_SECRET",
)
BEARER_VARIABLE = "TWITTER_BEARER_TOKEN"


class MissingCredentials(Exception):
    """Required Twitter credentials are not configured."""

    def __init__(self, required):
        self.required = list(required)
        super().__init__(f"Missing configuration: {', '.join(self.required)}")


class ConfigurationError(ValueError):
    """An environment variable holds a value we cannot use."""

    def __init__(self, name, value, expected):
        self.name = name
        super().__init__(f"{name}={value!r} is not valid: expected {expected}")


def _number(env, name, default, cast, expected):
    value = env.get(name)
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(name, value, expected) from None


def _log_level(env):
    value = (env.get("LOG_LEVEL") or "INFO").upper()
    if not isinstance(logging.getLevelName(value), int):
        raise ConfigurationError("LOG_LEVEL", value, "a logging level such as INFO or DEBUG")
    return value


@dataclass(frozen=True)
class OAuth1Credentials:
    api_key: str
    api_secret: str
    access_token: str
    access_token_secret: str


@dataclass(frozen=True)
class BearerCredentials:
    bearer_token: str


Credentials = Union[OAuth1Credentials, BearerCredentials]


@dataclass(frozen=True)
class Settings:
    credentials: Optional[Credentials] = None
    missing: Tuple[str, ...] = ()
    tweets_url: str = DEFAULT_TWEETS_URL
    status_url_template: str = DEFAULT_STATUS_URL
    timeout: float = DEFAULT_TIMEOUT
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Any OAuth variable being set selects OAuth 1.0a, and then all four
        are required. Otherwise a bearer token is used when present.
        """
        env = os.environ if environ is None else environ
        oauth_values = [env.get(name) or "" for name in OAUTH1_VARIABLES]

        credentials = None
        missing = ()
        if any(oauth_values):
            if all(oauth_values):
                credentials = OAuth1Credentials(*oauth_values)
            else:
                missing = OAUTH1_VARIABLES
        elif env.get(BEARER_VARIABLE):
            credentials = BearerCredentials(env[BEARER_VARIABLE])
        else:
            missing = OAUTH1_VARIABLES

        return cls(
            credentials=credentials,
            missing=missing,
            tweets_url=env.get("TWITTER_API_URL") or DEFAULT_TWEETS_URL,
            status_url_template=env.get("TWITTER_STATUS_URL") or DEFAULT_STATUS_URL,
            timeout=_number(env, "TWITTER_TIMEOUT", DEFAULT_TIMEOUT, float, "a number of seconds"),
            port=_number(env, "PORT", DEFAULT_PORT, int, "an integer port"),
            log_level=_log_level(env),
        )

    def require_credentials(self) -> Credentials:
        if self.credentials is None:
            raise MissingCredentials(self.missing or OAUTH1_VARIABLES)
        return self.credentials


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
