#!/usr/bin/env python3
"""
Basic usage examples for Teams Mentions.

This script demonstrates how to compose mention-rich messages
programmatically. Examples 1-3 run offline; example 4 needs a Microsoft
Graph access token in TEAMS_MENTIONS_ACCESS_TOKEN.
"""

import asyncio
import json
import os

from teams_mentions import compose_message
from teams_mentions.config import GraphConfig
from teams_mentions.graph import GraphClient, UserDirectory, send_channel_message
from teams_mentions.mentions import (
    ChannelMention,
    MalformedMentionError,
    UserMention,
    process_mentions_in_html,
)


def example_injection():
    """Example: Inject mention markup into HTML directly."""
    print("=" * 60)
    print("Example 1: Mention Injection")
    print("=" * 60)

    result = process_mentions_in_html(
        '<p>Hi @"John Doe", please check @General</p>',
        [
            UserMention(mention="John Doe", user_id="00000000-0000-0000-0000-000000000001", display_name="John Doe"),
            ChannelMention(mention="General", channel_id="19:general@thread.tacv2", display_name="General"),
        ],
    )

    print(f"\nContent: {result.content}")
    print(json.dumps([m.to_graph() for m in result.mentions], indent=2))


def example_compose_markdown():
    """Example: Compose a markdown message without directory lookups."""
    print("\n" + "=" * 60)
    print("Example 2: Compose Markdown")
    print("=" * 60)

    composed = asyncio.run(
        compose_message(
            "**Release 1.2** is out. Thanks @jdoe and everyone in @General!",
            format="markdown",
            importance="high",
            mentions=[
                {"mention": "jdoe", "userId": "00000000-0000-0000-0000-000000000001"},
                {"mention": "General", "channelId": "19:general@thread.tacv2"},
            ],
        )
    )

    print(json.dumps(composed.to_payload(), indent=2))


def example_malformed_mention():
    """Example: A mention must name a user or a channel, not both."""
    print("\n" + "=" * 60)
    print("Example 3: Malformed Mention")
    print("=" * 60)

    try:
        asyncio.run(
            compose_message(
                "@Oops",
                mentions=[{"mention": "Oops", "userId": "u1", "channelId": "19:x@thread.tacv2"}],
            )
        )
    except MalformedMentionError as e:
        print(f"\nRejected: {e}")


async def example_send_to_channel(team_id: str, channel_id: str, user_id: str):
    """Example: Look up a display name and send to a channel."""
    print("\n" + "=" * 60)
    print("Example 4: Send to a Channel")
    print("=" * 60)

    async with GraphClient(GraphConfig.from_env()) as client:
        composed = await compose_message(
            "Welcome aboard @newcomer!",
            mentions=[{"mention": "newcomer", "userId": user_id}],
            directory=UserDirectory(client),
        )
        for warning in composed.warnings:
            print(f"Warning: {warning.message}")
        sent = await send_channel_message(client, team_id, channel_id, composed)

    print(f"\nSent message {sent.id}")


if __name__ == "__main__":
    example_injection()
    example_compose_markdown()
    example_malformed_mention()

    team = os.environ.get("EXAMPLE_TEAM_ID")
    channel = os.environ.get("EXAMPLE_CHANNEL_ID")
    user = os.environ.get("EXAMPLE_USER_ID")
    if GraphConfig.from_env().access_token and team and channel and user:
        asyncio.run(example_send_to_channel(team, channel, user))
    else:
        print("\nSet TEAMS_MENTIONS_ACCESS_TOKEN, EXAMPLE_TEAM_ID, EXAMPLE_CHANNEL_ID and EXAMPLE_USER_ID to run example 4.")
