"""Mention models, validation, resolution and markup injection."""

from teams_mentions.mentions.injector import (
    InjectionResult,
    build_mention_pattern,
    process_mentions_in_html,
)
from teams_mentions.mentions.models import (
    ChannelMention,
    GraphMention,
    MentionMapping,
    UserMention,
    is_channel_mention,
    is_user_mention,
)
from teams_mentions.mentions.normalizer import (
    MentionResolution,
    MentionWarning,
    check_channel_id_format,
    resolve_mentions,
)
from teams_mentions.mentions.validation import (
    MalformedMentionError,
    MentionInput,
    MentionInputList,
    check_mention_inputs,
    validate_mention_inputs,
)

__all__ = [
    "ChannelMention",
    "GraphMention",
    "InjectionResult",
    "MalformedMentionError",
    "MentionInput",
    "MentionInputList",
    "MentionMapping",
    "MentionResolution",
    "MentionWarning",
    "UserMention",
    "build_mention_pattern",
    "check_channel_id_format",
    "check_mention_inputs",
    "is_channel_mention",
    "is_user_mention",
    "process_mentions_in_html",
    "resolve_mentions",
    "validate_mention_inputs",
]
