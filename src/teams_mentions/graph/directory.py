"""
User directory backed by Microsoft Graph ``/users``.

Resolves user ids to display names for mentions and searches users by name
or email for mention suggestions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from teams_mentions.config import DEFAULT_SEARCH_LIMIT
from teams_mentions.graph.client import GraphClient, GraphError

logger = logging.getLogger(__name__)

USER_SELECT_FIELDS = "id,displayName,userPrincipalName"


@dataclass(frozen=True)
class UserInfo:
    """A directory user."""

    id: str
    display_name: str
    user_principal_name: Optional[str] = None

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "UserInfo":
        return cls(
            id=data.get("id") or "",
            display_name=data.get("displayName") or "Unknown User",
            user_principal_name=data.get("userPrincipalName") or None,
        )


def _odata_literal(value: str) -> str:
    """Quote a string for an OData filter."""
    return "'" + value.replace("'", "''") + "'"


class UserDirectory:
    """Looks up users through a GraphClient."""

    def __init__(self, client: GraphClient):
        self.client = client

    async def lookup_display_name(self, user_id: str) -> Optional[str]:
        """
        Get a user's display name.

        Returns None when the user does not exist. Other Graph failures are
        raised as GraphError so callers can decide how to degrade.
        """
        try:
            data = await self.client.get_json(
                f"/users/{quote(user_id, safe='')}",
                params={"$select": "displayName"},
            )
        except GraphError as e:
            if e.is_not_found:
                return None
            raise
        return data.get("displayName") or None

    async def get_user_by_id(self, user_id: str) -> Optional[UserInfo]:
        """Get a user by id, or None if not found or not accessible."""
        try:
            data = await self.client.get_json(
                f"/users/{quote(user_id, safe='')}",
                params={"$select": USER_SELECT_FIELDS},
            )
        except GraphError:
            return None
        return UserInfo.from_graph(data)

    async def get_user_by_email(self, email: str) -> Optional[UserInfo]:
        """Get a user by exact email or UPN, or None if not found."""
        try:
            data = await self.client.get_json(f"/users/{quote(email, safe='@')}")
        except GraphError:
            return None
        return UserInfo.from_graph(data)

    async def search_users(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[UserInfo]:
        """
        Search users whose display name or UPN starts with ``query``.

        Args:
            query: Name or email prefix
            limit: Maximum number of users to return

        Returns:
            Matching users, empty on any Graph error
        """
        literal = _odata_literal(query)
        params = {
            "$filter": f"startswith(displayName,{literal}) or startswith(userPrincipalName,{literal})",
            "$top": str(limit),
            "$select": USER_SELECT_FIELDS,
        }
        try:
            data = await self.client.get_json("/users", params=params)
        except GraphError as e:
            logger.error(f"Error searching users for {query!r}: {e}")
            return []

        return [UserInfo.from_graph(user) for user in data.get("value") or []]
