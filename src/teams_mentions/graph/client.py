"""
Thin async client for Microsoft Graph.

Wraps an ``httpx.AsyncClient`` with bearer auth and turns transport and HTTP
failures into ``GraphError``.
"""

import logging
from typing import Any

import httpx

from teams_mentions.config import GraphConfig

logger = logging.getLogger(__name__)


class GraphError(Exception):
    """A Microsoft Graph request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class GraphClient:
    """
    Async Microsoft Graph client.

    Use as an async context manager::

        async with GraphClient(GraphConfig.from_env()) as client:
            me = await client.get_json("/me")
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or GraphConfig.from_env()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GraphClient":
        token = self.config.require_token()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GraphClient must be used inside 'async with'")
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = self._require_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout calling Graph {method} {path}")
            raise GraphError(f"Timeout calling Microsoft Graph: {method} {path}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"HTTP error calling Graph {method} {path}: {status}")
            raise GraphError(_error_message(e.response), status_code=status) from e
        except httpx.HTTPError as e:
            logger.warning(f"Error calling Graph {method} {path}: {e}")
            raise GraphError(f"Error calling Microsoft Graph: {e}") from e

        if not response.content:
            return {}
        return response.json()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a Graph resource and return its JSON body."""
        return await self._request("GET", path, params=params)

    async def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and return the JSON response."""
        return await self._request("POST", path, json=payload)


def _error_message(response: httpx.Response) -> str:
    """Pull the Graph error message out of an error response."""
    try:
        error = response.json().get("error", {})
        message = error.get("message")
    except (ValueError, AttributeError):
        message = None
    return message or f"Microsoft Graph returned HTTP {response.status_code}"
