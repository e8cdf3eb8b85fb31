"""
Message composition pipeline.

Runs the steps needed before a message can be posted to Teams:

1. render the message (markdown or plain text)
2. validate and resolve mention inputs (user display names via the directory)
3. inject ``<at>`` markup into the rendered HTML and build Graph mentions

The result is a ``ComposedMessage`` whose ``to_payload()`` is the Graph
``chatMessage`` request body.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from teams_mentions.config import DEFAULT_LOOKUP_TIMEOUT, MAX_CONCURRENT_LOOKUPS
from teams_mentions.mentions.injector import process_mentions_in_html
from teams_mentions.mentions.models import GraphMention, is_channel_mention
from teams_mentions.mentions.normalizer import (
    DirectoryLookup,
    MentionWarning,
    resolve_mentions,
)
from teams_mentions.mentions.validation import (
    MalformedMentionError,
    MentionInput,
    check_mention_inputs,
    coerce_mention_inputs,
)
from teams_mentions.rendering import (
    ContentType,
    MessageFormat,
    render_content,
    text_to_html,
)

logger = logging.getLogger(__name__)

Importance = Literal["normal", "high", "urgent"]
IMPORTANCE_LEVELS: tuple[str, ...] = ("normal", "high", "urgent")


@dataclass
class ComposedMessage:
    """A message body ready to be sent to Graph."""

    content: str
    content_type: ContentType
    importance: Importance = "normal"
    mentions: list[GraphMention] = field(default_factory=list)
    warnings: list[MentionWarning] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Build the Graph ``chatMessage`` request body."""
        payload: dict[str, Any] = {
            "body": {
                "content": self.content,
                "contentType": self.content_type,
            },
            "importance": self.importance,
        }
        if self.mentions:
            payload["mentions"] = [mention.to_graph() for mention in self.mentions]
        return payload


def _reject_channel_mentions(items: Sequence[MentionInput]) -> None:
    for item in items:
        if item.channel_id:
            raise MalformedMentionError(
                item.mention,
                "channel_in_chat",
                f'Invalid mention configuration for "{item.mention}": channel mentions are only '
                f"supported in channel messages. Chat mentions must use 'userId', not 'channelId'.",
            )


async def compose_message(
    message: str,
    *,
    format: MessageFormat = "text",
    importance: Importance = "normal",
    mentions: Sequence[MentionInput | Mapping[str, Any]] | None = None,
    directory: DirectoryLookup | None = None,
    allow_channel_mentions: bool = True,
    timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    max_concurrent: int = MAX_CONCURRENT_LOOKUPS,
) -> ComposedMessage:
    """
    Compose a Teams message with @mentions.

    Args:
        message: Message text
        format: ``text`` or ``markdown``
        importance: ``normal``, ``high`` or ``urgent``
        mentions: Mention inputs, each with exactly one of userId / channelId
        directory: Used to look up user display names; None skips lookups
        allow_channel_mentions: False for chats, which only support users
        timeout: Seconds to wait for each display name lookup
        max_concurrent: Maximum concurrent lookups

    Returns:
        The composed message

    Raises:
        MalformedMentionError: if a mention input is invalid
    """
    if importance not in IMPORTANCE_LEVELS:
        raise ValueError(
            f"Unsupported importance: {importance}. Supported levels: {', '.join(IMPORTANCE_LEVELS)}"
        )

    items = coerce_mention_inputs(mentions or [])
    check_mention_inputs(items)
    if not allow_channel_mentions:
        _reject_channel_mentions(items)

    rendered = render_content(message, format)

    if not items:
        return ComposedMessage(
            content=rendered.content,
            content_type=rendered.content_type,
            importance=importance,
        )

    resolution = await resolve_mentions(
        items,
        directory=directory,
        timeout=timeout,
        max_concurrent=max_concurrent,
    )

    html = rendered.content if rendered.content_type == "html" else text_to_html(rendered.content)
    result = process_mentions_in_html(html, resolution.mappings)

    channel_count = sum(1 for m in resolution.mappings if is_channel_mention(m))
    logger.debug(
        f"Composed message with {len(result.mentions)} mention(s) "
        f"({channel_count} channel, {len(resolution.warnings)} warning(s))"
    )

    return ComposedMessage(
        content=result.content,
        content_type="html",
        importance=importance,
        mentions=result.mentions,
        warnings=resolution.warnings,
    )
