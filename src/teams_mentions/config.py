"""Configuration for the Teams mentions toolkit."""

import os
from dataclasses import dataclass

# Microsoft Graph endpoint
GRAPH_API_BASE_URL = "https://graph.microsoft.com/v1.0"

# Configurable constants
DEFAULT_LOOKUP_TIMEOUT: float = 10.0
MAX_CONCURRENT_LOOKUPS: int = 10
DEFAULT_SEARCH_LIMIT: int = 10
PARSE_SUGGESTION_LIMIT: int = 5

# Teams channel ids look like 19:xxx@thread.tacv2
CHANNEL_ID_PATTERN = r"^19:[a-zA-Z0-9_-]+@thread\.tacv2$"

ACCESS_TOKEN_ENV_VARS: tuple[str, ...] = (
    "TEAMS_MENTIONS_ACCESS_TOKEN",
    "GRAPH_ACCESS_TOKEN",
)


class ConfigurationError(Exception):
    """Raised when a Graph call is needed but no access token is configured."""


@dataclass
class GraphConfig:
    """Settings for talking to Microsoft Graph."""

    access_token: str | None = None
    base_url: str = GRAPH_API_BASE_URL
    timeout: float = DEFAULT_LOOKUP_TIMEOUT
    max_concurrent_lookups: int = MAX_CONCURRENT_LOOKUPS

    @classmethod
    def from_env(cls) -> "GraphConfig":
        """Build a config from ``TEAMS_MENTIONS_*`` environment variables."""
        token = None
        for name in ACCESS_TOKEN_ENV_VARS:
            token = os.environ.get(name)
            if token:
                break

        return cls(
            access_token=token or None,
            base_url=os.environ.get("TEAMS_MENTIONS_GRAPH_URL", GRAPH_API_BASE_URL).rstrip("/"),
            timeout=float(os.environ.get("TEAMS_MENTIONS_TIMEOUT", DEFAULT_LOOKUP_TIMEOUT)),
            max_concurrent_lookups=int(
                os.environ.get("TEAMS_MENTIONS_MAX_CONCURRENT_LOOKUPS", MAX_CONCURRENT_LOOKUPS)
            ),
        )

    def require_token(self) -> str:
        """Return the access token or raise ConfigurationError."""
        if not self.access_token:
            names = " or ".join(ACCESS_TOKEN_ENV_VARS)
            raise ConfigurationError(
                f"No Microsoft Graph access token configured. Set {names}."
            )
        return self.access_token


DEFAULT_CONFIG = GraphConfig()
