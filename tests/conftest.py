"""Shared test fixtures."""

import asyncio
import json

import httpx
import pytest

from teams_mentions.config import GraphConfig
from teams_mentions.graph.directory import UserInfo


class FakeDirectory:
    """In-memory stand-in for the Graph user directory."""

    def __init__(self, names=None, failures=None, delays=None, users=None):
        self.names = names or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.users = users or []
        self.calls: list[str] = []

    async def lookup_display_name(self, user_id):
        self.calls.append(user_id)
        if user_id in self.delays:
            await asyncio.sleep(self.delays[user_id])
        if user_id in self.failures:
            raise self.failures[user_id]
        return self.names.get(user_id)

    async def get_user_by_email(self, email):
        for user in self.users:
            if user.user_principal_name == email:
                return user
        return None

    async def search_users(self, query, limit=10):
        matches = [
            u for u in self.users
            if u.display_name.startswith(query) or (u.user_principal_name or "").startswith(query)
        ]
        return matches[:limit]


@pytest.fixture
def fake_directory():
    """A directory that knows two users."""
    return FakeDirectory(names={"u1": "John Doe", "u2": "Jane Smith"})


@pytest.fixture
def directory_users():
    return [
        UserInfo(id="u1", display_name="John Doe", user_principal_name="john.doe@contoso.com"),
        UserInfo(id="u2", display_name="Jane Smith", user_principal_name="jane.smith@contoso.com"),
        UserInfo(id="u3", display_name="Janet Jones", user_principal_name="janet@contoso.com"),
    ]


@pytest.fixture
def graph_config():
    """Graph settings with a dummy token."""
    return GraphConfig(access_token="test-token", base_url="https://graph.test/v1.0", timeout=5.0)


class GraphRecorder:
    """httpx MockTransport handler that records requests and serves canned routes."""

    def __init__(self, routes=None):
        # (method, path) -> (status, json body)
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": {"code": "NotFound", "message": "Resource not found"}})
        status, body = self.routes[key]
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def json_bodies(self):
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def graph_recorder():
    return GraphRecorder()


@pytest.fixture
def make_directory():
    """Factory for FakeDirectory instances."""
    return FakeDirectory


@pytest.fixture
def make_recorder():
    """Factory for GraphRecorder instances."""
    return GraphRecorder
