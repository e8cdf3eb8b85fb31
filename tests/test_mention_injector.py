"""Tests for mention markup injection."""

import logging

import pytest

from teams_mentions.mentions.injector import (
    build_mention_pattern,
    mention_span,
    process_mentions_in_html,
)
from teams_mentions.mentions.models import ChannelMention, UserMention


def user(mention, user_id, display_name=None):
    return UserMention(mention=mention, user_id=user_id, display_name=display_name or mention)


def channel(mention, channel_id, display_name=None):
    return ChannelMention(mention=mention, channel_id=channel_id, display_name=display_name or mention)


class TestBuildMentionPattern:
    """Tests for build_mention_pattern function."""

    def test_matches_bare_and_quoted(self):
        """Test that both @john and @"john" match."""
        pattern = build_mention_pattern("john")

        assert pattern.search("hi @john")
        assert pattern.search('hi @"john"')

    def test_whitespace_only_matches_quoted(self):
        """Test that text with a space only matches in quotes."""
        pattern = build_mention_pattern("John Doe")

        assert pattern.search('Hi @"John Doe"!')
        assert not pattern.search("Hi @John Doe!")

    def test_case_sensitive(self):
        """Test that matching is case-sensitive."""
        pattern = build_mention_pattern("John")

        assert not pattern.search("@john")

    def test_escapes_regex_metacharacters(self):
        """Test that metacharacters in mention text are matched literally."""
        pattern = build_mention_pattern("a.b*c")

        assert pattern.search("@a.b*c")
        assert not pattern.search("@axbbbc")

    def test_requires_at_sign(self):
        """Test that plain text without @ is not matched."""
        pattern = build_mention_pattern("General")

        assert not pattern.search("General meeting")

    def test_matches_html_escaped_text(self):
        """Test that mention text is also matched in its HTML-escaped form."""
        pattern = build_mention_pattern("R&D Team")

        assert pattern.search('@"R&D Team"')
        assert pattern.search('@"R&amp;D Team"')
        assert not pattern.search('@"R&amp;amp;D Team"')


class TestProcessMentionsInHtml:
    """Tests for process_mentions_in_html function."""

    def test_empty_mappings_is_noop(self):
        """Test that no mappings leaves the content untouched."""
        result = process_mentions_in_html("<p>Hello @John</p>", [])

        assert result.content == "<p>Hello @John</p>"
        assert result.mentions == []

    def test_quoted_user_mention(self):
        """Test the basic quoted user mention scenario."""
        result = process_mentions_in_html('Hi @"John Doe"!', [user("John Doe", "u1")])

        assert result.content == 'Hi <at id="0">John Doe</at>!'
        assert [m.to_graph() for m in result.mentions] == [
            {"id": 0, "mentionText": "John Doe", "mentioned": {"user": {"id": "u1"}}}
        ]

    def test_display_name_replaces_mention_text(self):
        """Test that the span shows the display name, not the typed text."""
        result = process_mentions_in_html("<p>Ping @jdoe</p>", [user("jdoe", "u1", "John Doe")])

        assert result.content == '<p>Ping <at id="0">John Doe</at></p>'
        assert result.mentions[0].mention_text == "John Doe"

    def test_repeated_channel_mention(self):
        """Test that all occurrences share one id and one record."""
        mapping = channel("General", "19:abc@thread.tacv2")

        result = process_mentions_in_html("@General please read. Thanks @General", [mapping])

        assert result.content.count('<at id="0">General</at>') == 2
        assert "@General" not in result.content
        assert len(result.mentions) == 1
        assert result.mentions[0].to_graph()["mentioned"] == {
            "conversation": {
                "id": "19:abc@thread.tacv2",
                "displayName": "General",
                "conversationIdentityType": "channel",
            }
        }

    def test_ids_follow_input_order_not_text_order(self):
        """Test that sequence ids come from input order."""
        mappings = [user("John", "u1"), channel("General", "19:abc@thread.tacv2")]

        result = process_mentions_in_html("@General and then @John", mappings)

        assert result.content == '<at id="1">General</at> and then <at id="0">John</at>'
        assert [m.id for m in result.mentions] == [0, 1]
        assert result.mentions[0].is_user
        assert not result.mentions[1].is_user

    def test_ids_are_dense(self):
        """Test that N mappings give ids 0..N-1."""
        mappings = [user(f"user{i}", f"u{i}") for i in range(5)]

        result = process_mentions_in_html("nobody here", mappings)

        assert [m.id for m in result.mentions] == [0, 1, 2, 3, 4]

    def test_unmatched_mention_still_emits_record(self):
        """Test that a mention missing from the text is not an error."""
        result = process_mentions_in_html("<p>No mentions</p>", [user("John", "u1")])

        assert result.content == "<p>No mentions</p>"
        assert len(result.mentions) == 1

    def test_duplicate_mapping_gets_two_records(self):
        """Test that supplying the same mapping twice yields two ids."""
        mapping = user("John", "u1")

        result = process_mentions_in_html("@John", [mapping, mapping])

        assert [m.id for m in result.mentions] == [0, 1]
        assert result.content == '<at id="0">John</at>'

    def test_display_name_with_backslashes_is_literal(self):
        """Test that the replacement does not interpret backslash escapes."""
        result = process_mentions_in_html("@svc", [user("svc", "u1", r"Build\1 Bot")])

        assert result.content == r'<at id="0">Build\1 Bot</at>'

    def test_display_name_is_html_escaped(self):
        """Test that markup characters in display names are escaped in the span."""
        result = process_mentions_in_html("@ab", [user("ab", "u1", "A<B & C")])

        assert result.content == '<at id="0">A&lt;B &amp; C</at>'
        assert result.mentions[0].mention_text == "A<B & C"

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_span_count_matches_occurrences(self, count):
        """Test that K occurrences produce K spans."""
        content = " ".join(["@Jane"] * count)

        result = process_mentions_in_html(content, [user("Jane", "u2")])

        assert result.content.count(mention_span(0, "Jane")) == count
        assert len(result.mentions) == 1

    def test_overlapping_mentions_are_flagged(self, caplog):
        """Test that a mention contained in another is logged."""
        mappings = [user("John", "u1"), user("John Doe", "u2")]

        with caplog.at_level(logging.WARNING, logger="teams_mentions.mentions.injector"):
            process_mentions_in_html('@"John Doe"', mappings)

        assert "contained in mention" in caplog.text
