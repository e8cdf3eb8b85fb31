"""
Mention types for Teams messages.

A mention mapping ties the ``@text`` written in a message to exactly one
entity: a user or a channel. Graph mention records are the wire format sent
to Microsoft Graph alongside the message body.

See https://learn.microsoft.com/en-us/graph/api/resources/chatmessagemention
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ============== Mention Mappings ==============


@dataclass(frozen=True)
class UserMention:
    """Maps ``@mention`` text to an Azure AD user."""

    mention: str
    user_id: str
    display_name: str


@dataclass(frozen=True)
class ChannelMention:
    """Maps ``@mention`` text to a Teams channel."""

    mention: str
    channel_id: str
    display_name: str


MentionMapping = UserMention | ChannelMention


def is_user_mention(mapping: MentionMapping) -> bool:
    """Check if a mention mapping points at a user."""
    return isinstance(mapping, UserMention)


def is_channel_mention(mapping: MentionMapping) -> bool:
    """Check if a mention mapping points at a channel."""
    return isinstance(mapping, ChannelMention)


# ============== Graph API Mention Records ==============


class MentionedUser(BaseModel):
    """The user identity inside a Graph mention."""

    model_config = ConfigDict(frozen=True)

    id: str


class MentionedConversation(BaseModel):
    """The channel identity inside a Graph mention."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    display_name: str = Field(alias="displayName")
    conversation_identity_type: Literal["channel"] = Field(
        default="channel", alias="conversationIdentityType"
    )


class UserMentioned(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: MentionedUser


class ConversationMentioned(BaseModel):
    model_config = ConfigDict(frozen=True)

    conversation: MentionedConversation


class GraphMention(BaseModel):
    """A mention record in Microsoft Graph ``chatMessageMention`` format."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(description="Sequence id matching the <at id> in the message body")
    mention_text: str = Field(alias="mentionText", description="Text shown for the mention")
    mentioned: UserMentioned | ConversationMentioned

    @classmethod
    def for_mapping(cls, sequence_id: int, mapping: MentionMapping) -> "GraphMention":
        """Build the Graph record for a user or channel mapping."""
        if isinstance(mapping, UserMention):
            mentioned: UserMentioned | ConversationMentioned = UserMentioned(
                user=MentionedUser(id=mapping.user_id)
            )
        else:
            mentioned = ConversationMentioned(
                conversation=MentionedConversation(
                    id=mapping.channel_id,
                    display_name=mapping.display_name,
                )
            )
        return cls(id=sequence_id, mention_text=mapping.display_name, mentioned=mentioned)

    @property
    def is_user(self) -> bool:
        return isinstance(self.mentioned, UserMentioned)

    def to_graph(self) -> dict[str, Any]:
        """Dump the record with Graph field names."""
        return self.model_dump(by_alias=True)
