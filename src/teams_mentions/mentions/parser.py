"""
@mention suggestions.

Finds ``@name``, ``@user@domain.com`` and ``@"Full Name"`` tokens in text and
asks the directory which users they could refer to. The caller picks the
right user and passes explicit mention inputs when sending.
"""

import re
from dataclasses import dataclass, field
from typing import Protocol

from teams_mentions.config import PARSE_SUGGESTION_LIMIT
from teams_mentions.graph.directory import UserInfo

MENTION_TOKEN_PATTERN = re.compile(r'@(?:"([^"]+)"|([^\s@]+(?:@[^\s@]+\.[^\s@]+)?))')


class UserSearch(Protocol):
    async def get_user_by_email(self, email: str) -> UserInfo | None: ...

    async def search_users(self, query: str, limit: int = ...) -> list[UserInfo]: ...


@dataclass
class MentionCandidates:
    """An @mention found in text and the users it might mean."""

    mention: str
    users: list[UserInfo] = field(default_factory=list)


def find_mention_tokens(text: str) -> list[str]:
    """Return the @mention tokens in text order, quotes removed."""
    return [quoted or bare for quoted, bare in MENTION_TOKEN_PATTERN.findall(text)]


def looks_like_email(token: str) -> bool:
    return "@" in token and "." in token


async def parse_mentions(
    text: str,
    directory: UserSearch,
    limit: int = PARSE_SUGGESTION_LIMIT,
) -> list[MentionCandidates]:
    """
    Find @mentions in text and suggest matching users.

    Email-looking tokens are tried as an exact lookup first; everything else
    (and emails that did not resolve) goes through a prefix search.
    """
    results = []
    for token in find_mention_tokens(text):
        users: list[UserInfo] = []

        if looks_like_email(token):
            user = await directory.get_user_by_email(token)
            if user:
                users = [user]

        if not users:
            users = await directory.search_users(token, limit)

        results.append(MentionCandidates(mention=token, users=users))

    return results
