"""Microsoft Graph access: client, user directory and message sending."""

from teams_mentions.graph.client import GraphClient, GraphError
from teams_mentions.graph.directory import UserDirectory, UserInfo
from teams_mentions.graph.messages import (
    SentMessage,
    send_channel_message,
    send_channel_reply,
    send_chat_message,
)

__all__ = [
    "GraphClient",
    "GraphError",
    "SentMessage",
    "UserDirectory",
    "UserInfo",
    "send_channel_message",
    "send_channel_reply",
    "send_chat_message",
]
