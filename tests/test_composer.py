"""Tests for the message composition pipeline."""

import pytest

from teams_mentions.composer import compose_message
from teams_mentions.mentions.validation import MalformedMentionError, MentionInput


class TestComposeMessage:
    """Tests for compose_message function."""

    @pytest.mark.asyncio
    async def test_plain_text_without_mentions(self):
        """Test that plain text without mentions stays text."""
        composed = await compose_message("Hello team")

        assert composed.content == "Hello team"
        assert composed.content_type == "text"
        assert composed.to_payload() == {
            "body": {"content": "Hello team", "contentType": "text"},
            "importance": "normal",
        }

    @pytest.mark.asyncio
    async def test_empty_mentions_omitted_from_payload(self):
        """Test that an empty mention list leaves no mentions key."""
        composed = await compose_message("<b>raw</b>", mentions=[])

        assert composed.content == "<b>raw</b>"
        assert "mentions" not in composed.to_payload()

    @pytest.mark.asyncio
    async def test_text_with_mention_switches_to_html(self):
        """Test that mentions force an HTML body."""
        composed = await compose_message(
            'Hi @"John Doe"!',
            mentions=[MentionInput(mention="John Doe", user_id="u1")],
        )

        assert composed.content == 'Hi <at id="0">John Doe</at>!'
        assert composed.content_type == "html"
        assert composed.to_payload()["mentions"] == [
            {"id": 0, "mentionText": "John Doe", "mentioned": {"user": {"id": "u1"}}}
        ]

    @pytest.mark.asyncio
    async def test_text_with_mention_is_escaped(self):
        """Test that plain text is escaped before markup is injected."""
        composed = await compose_message(
            "1 < 2 @jane\nbye",
            mentions=[{"mention": "jane", "userId": "u2"}],
        )

        assert composed.content == '1 &lt; 2 <at id="0">jane</at><br>bye'

    @pytest.mark.asyncio
    async def test_text_mention_with_ampersand(self):
        """Test that mention text with markup characters still matches after escaping."""
        composed = await compose_message(
            'Ping @"R&D Team" now',
            mentions=[{"mention": "R&D Team", "channelId": "19:rd@thread.tacv2"}],
        )

        assert composed.content == 'Ping <at id="0">R&amp;D Team</at> now'
        assert composed.to_payload()["mentions"][0]["mentionText"] == "R&D Team"

    @pytest.mark.asyncio
    async def test_markdown_mention_with_ampersand(self):
        """Test that markdown escaping does not hide mentions."""
        composed = await compose_message(
            "**Ping** @R&D",
            format="markdown",
            mentions=[{"mention": "R&D", "userId": "u9"}],
        )

        assert composed.content == '<p><strong>Ping</strong> <at id="0">R&amp;D</at></p>'

    @pytest.mark.asyncio
    async def test_markdown_with_mentions(self, fake_directory):
        """Test markdown rendering followed by injection with looked-up names."""
        composed = await compose_message(
            "**Standup** @General with @jdoe",
            format="markdown",
            importance="urgent",
            mentions=[
                {"mention": "jdoe", "userId": "u1"},
                {"mention": "General", "channelId": "19:abc@thread.tacv2"},
            ],
            directory=fake_directory,
        )

        assert composed.content == (
            '<p><strong>Standup</strong> <at id="1">General</at> with <at id="0">John Doe</at></p>'
        )
        payload = composed.to_payload()
        assert payload["importance"] == "urgent"
        assert payload["body"]["contentType"] == "html"
        assert [m["id"] for m in payload["mentions"]] == [0, 1]
        assert payload["mentions"][1]["mentioned"]["conversation"]["conversationIdentityType"] == "channel"

    @pytest.mark.asyncio
    async def test_warnings_are_collected(self, make_directory):
        """Test that lookup and shape problems are reported, not raised."""
        directory = make_directory(failures={"u1": RuntimeError("boom")})

        composed = await compose_message(
            "@john @General",
            mentions=[
                {"mention": "john", "userId": "u1"},
                {"mention": "General", "channelId": "bad-id"},
            ],
            directory=directory,
        )

        assert {w.kind for w in composed.warnings} == {"lookup_failed", "channel_id_format"}
        assert composed.content == '<at id="0">john</at> <at id="1">General</at>'

    @pytest.mark.asyncio
    async def test_malformed_mention_fails_request(self, fake_directory):
        """Test that an invalid mention fails the whole composition."""
        with pytest.raises(MalformedMentionError):
            await compose_message(
                "@x",
                mentions=[{"mention": "x", "userId": "u1", "channelId": "19:abc@thread.tacv2"}],
                directory=fake_directory,
            )

        assert fake_directory.calls == []

    @pytest.mark.asyncio
    async def test_chat_rejects_channel_mentions(self):
        """Test that chats only accept user mentions."""
        with pytest.raises(MalformedMentionError) as exc_info:
            await compose_message(
                "@General",
                mentions=[{"mention": "General", "channelId": "19:abc@thread.tacv2"}],
                allow_channel_mentions=False,
            )

        assert exc_info.value.reason == "channel_in_chat"

    @pytest.mark.asyncio
    async def test_invalid_importance(self):
        """Test that unknown importance levels are rejected."""
        with pytest.raises(ValueError, match="Unsupported importance"):
            await compose_message("hi", importance="critical")
