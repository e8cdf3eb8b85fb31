"""Posting composed messages to Teams channels and chats."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

from teams_mentions.graph.client import GraphClient

if TYPE_CHECKING:
    from teams_mentions.composer import ComposedMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentMessage:
    """The message Graph created."""

    id: str
    web_url: Optional[str] = None

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "SentMessage":
        return cls(id=data.get("id") or "", web_url=data.get("webUrl"))


def _segment(value: str) -> str:
    return quote(value, safe=":@.")


async def send_channel_message(
    client: GraphClient,
    team_id: str,
    channel_id: str,
    message: "ComposedMessage",
) -> SentMessage:
    """POST a composed message to a team channel."""
    path = f"/teams/{_segment(team_id)}/channels/{_segment(channel_id)}/messages"
    data = await client.post_json(path, message.to_payload())
    sent = SentMessage.from_graph(data)
    logger.info(f"Sent channel message {sent.id} with {len(message.mentions)} mention(s)")
    return sent


async def send_chat_message(
    client: GraphClient,
    chat_id: str,
    message: "ComposedMessage",
) -> SentMessage:
    """POST a composed message to a chat."""
    path = f"/chats/{_segment(chat_id)}/messages"
    data = await client.post_json(path, message.to_payload())
    sent = SentMessage.from_graph(data)
    logger.info(f"Sent chat message {sent.id} with {len(message.mentions)} mention(s)")
    return sent


async def send_channel_reply(
    client: GraphClient,
    team_id: str,
    channel_id: str,
    message_id: str,
    message: "ComposedMessage",
) -> SentMessage:
    """POST a composed message as a reply to a channel message."""
    path = (
        f"/teams/{_segment(team_id)}/channels/{_segment(channel_id)}"
        f"/messages/{_segment(message_id)}/replies"
    )
    data = await client.post_json(path, message.to_payload())
    sent = SentMessage.from_graph(data)
    logger.info(f"Sent reply {sent.id} to message {message_id} with {len(message.mentions)} mention(s)")
    return sent
