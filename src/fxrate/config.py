"""Runtime settings for the CLI and server entry points.

Settings are read from the environment once at startup and handed to each
component explicitly; nothing else in the package looks at ``os.environ``.
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping

from fxrate.errors import ConfigError
from fxrate.file_sink import DEFAULT_OUTPUT_PATH
from fxrate.store import DEFAULT_DB_PATH

CLIENT_URL_ENV = "EXCHANGE_RATE_API_URL"
SERVER_URL_ENV = "EXTERNAL_API_URL"

EXCHANGE_RATE_ENDPOINT = "/exchange-rate"


def require(environ: Mapping[str, str], key: str) -> str:
    """Return ``environ[key]``, raising ConfigError when unset or blank."""
    value = environ.get(key, "").strip()
    if not value:
        raise ConfigError(f"environment variable {key} is not set")
    return value


def _given(overrides: dict[str, Any]) -> dict[str, Any]:
    # argparse hands over None for flags the user left out
    return {k: v for k, v in overrides.items() if v is not None and v != ""}


@dataclass(frozen=True)
class ClientSettings:
    api_url: str = ""
    output_path: str = DEFAULT_OUTPUT_PATH
    fetch_timeout: float = 0.3

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        require_url: bool = True,
        **overrides: Any,
    ) -> "ClientSettings":
        """Build settings from ``EXCHANGE_RATE_API_URL`` plus explicit overrides.

        ``require_url=False`` is for runs that never contact the API (``--mock``).
        """
        environ = os.environ if environ is None else environ
        given = _given(overrides)
        if "api_url" not in given and require_url:
            given["api_url"] = require(environ, CLIENT_URL_ENV)
        return cls(**given)


@dataclass(frozen=True)
class ServerSettings:
    api_url: str
    db_path: str = DEFAULT_DB_PATH
    endpoint: str = EXCHANGE_RATE_ENDPOINT
    fetch_timeout: float = 0.2
    store_timeout: float = 0.01
    host: str = "127.0.0.1"
    port: int = 8080
    pool_size: int = 4

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "ServerSettings":
        """Build settings from ``EXTERNAL_API_URL`` plus explicit overrides."""
        environ = os.environ if environ is None else environ
        given = _given(overrides)
        if "api_url" not in given:
            given["api_url"] = require(environ, SERVER_URL_ENV)
        return cls(**given)
