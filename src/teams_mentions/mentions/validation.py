"""
Validation of caller-supplied mention inputs.

Every mention input must name exactly one of ``userId`` or ``channelId``.
``check_mention_inputs`` is the one place that rule lives; both the
programmatic path (``validate_mention_inputs``) and the declarative schema
(``MentionInputList``) go through it.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator

from teams_mentions.mentions.models import ChannelMention, MentionMapping, UserMention

_REASON_DETAILS = {
    "both": "both 'userId' and 'channelId' are set",
    "neither": "neither 'userId' nor 'channelId' is set",
}

XOR_RULE = (
    "Each mention must specify exactly one of 'userId' (for user mentions) "
    "or 'channelId' (for channel mentions), not both and not neither."
)


class MalformedMentionError(ValueError):
    """A mention input violates the userId/channelId rule."""

    def __init__(self, mention: str, reason: str, message: str | None = None):
        self.mention = mention
        self.reason = reason
        if message is None:
            detail = _REASON_DETAILS.get(reason, reason)
            message = f'Invalid mention configuration for "{mention}": {detail}. {XOR_RULE}'
        super().__init__(message)


class MentionInput(BaseModel):
    """A mention as supplied by an API consumer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mention: str = Field(
        description="The @mention text as it appears in the message (e.g., 'John Doe' or 'General')"
    )
    user_id: str | None = Field(
        default=None,
        alias="userId",
        description="Azure AD User ID for user mentions - mutually exclusive with channelId",
    )
    channel_id: str | None = Field(
        default=None,
        alias="channelId",
        description="Channel ID for channel mentions (e.g., '19:abc123@thread.tacv2') - mutually exclusive with userId",
    )

    @property
    def has_user(self) -> bool:
        return bool(self.user_id)

    @property
    def has_channel(self) -> bool:
        return bool(self.channel_id)


def check_mention_input(item: MentionInput) -> None:
    """Raise MalformedMentionError unless exactly one entity id is set."""
    if item.has_user and item.has_channel:
        raise MalformedMentionError(item.mention, "both")
    if not item.has_user and not item.has_channel:
        raise MalformedMentionError(item.mention, "neither")


def check_mention_inputs(inputs: Iterable[MentionInput]) -> None:
    """Validate a whole list; the first bad element fails the lot."""
    for item in inputs:
        check_mention_input(item)


def coerce_mention_inputs(
    inputs: Iterable[MentionInput | Mapping[str, Any]],
) -> list[MentionInput]:
    """Accept MentionInput instances or wire-format dicts."""
    return [
        item if isinstance(item, MentionInput) else MentionInput.model_validate(item)
        for item in inputs
    ]


def validate_mention_inputs(
    inputs: Sequence[MentionInput | Mapping[str, Any]],
) -> list[MentionMapping]:
    """
    Convert mention inputs to mention mappings.

    The whole list is checked before anything is converted, so a single
    malformed entry means no mappings at all. Display names default to the
    mention text; use the normalizer to resolve real user names.

    Args:
        inputs: MentionInput objects or dicts with ``mention`` and one of
            ``userId`` / ``channelId``

    Returns:
        One UserMention or ChannelMention per input, in input order

    Raises:
        MalformedMentionError: if any input has both ids or neither
    """
    items = coerce_mention_inputs(inputs)
    check_mention_inputs(items)
    return [to_mention_mapping(item) for item in items]


def to_mention_mapping(item: MentionInput, display_name: str | None = None) -> MentionMapping:
    """Promote a validated input to a mapping."""
    label = display_name or item.mention
    if item.user_id:
        return UserMention(mention=item.mention, user_id=item.user_id, display_name=label)
    if item.channel_id:
        return ChannelMention(mention=item.mention, channel_id=item.channel_id, display_name=label)
    raise MalformedMentionError(item.mention, "neither")


class MentionInputList(RootModel[list[MentionInput]]):
    """
    Request-body schema for a list of mentions.

    Array of mention objects, refined so that every element names exactly
    one of 'userId' or 'channelId'.
    """

    root: list[MentionInput] = Field(
        default_factory=list,
        description="Array of mentions - each must specify either userId (for user mentions) or channelId (for channel mentions)",
    )

    @model_validator(mode="after")
    def _exactly_one_entity(self) -> "MentionInputList":
        check_mention_inputs(self.root)
        return self

    def __iter__(self) -> Iterator[MentionInput]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> MentionInput:
        return self.root[index]
