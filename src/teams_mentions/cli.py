"""
Command-line interface for Teams Mentions.

Usage:
    teams-mentions compose 'Hi @"John Doe"!' --user "John Doe=<user-id>"
    teams-mentions compose "**Heads up** @General" -f markdown --channel "General=19:abc@thread.tacv2"
    teams-mentions send-channel <team-id> <channel-id> "Hello @Jane" --user "Jane=<user-id>"
    teams-mentions reply-channel <team-id> <channel-id> <message-id> "Thanks @Jane" --user "Jane=<user-id>"
    teams-mentions send-chat <chat-id> "Ping @Jane" --user "Jane=<user-id>"
    teams-mentions search-users "Jane"
    teams-mentions parse 'Ask @"Jane Smith" and @bob@contoso.com'
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from teams_mentions.composer import ComposedMessage, compose_message
from teams_mentions.config import ConfigurationError, GraphConfig
from teams_mentions.graph.client import GraphClient, GraphError
from teams_mentions.graph.directory import UserDirectory
from teams_mentions.graph.messages import (
    send_channel_message,
    send_channel_reply,
    send_chat_message,
)
from teams_mentions.mentions.normalizer import check_channel_id_format
from teams_mentions.mentions.parser import parse_mentions
from teams_mentions.mentions.validation import MalformedMentionError, MentionInput

app = typer.Typer(
    name="teams-mentions",
    help="Compose and send Microsoft Teams messages with user and channel @mentions",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
):
    """Compose and send Microsoft Teams messages with @mentions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _split_pair(value: str, option: str) -> tuple[str, str]:
    """Split ``Text=ID`` on the last '=' so mention text may contain '='."""
    text, sep, entity_id = value.rpartition("=")
    if not sep or not text:
        raise typer.BadParameter(f"Expected 'Mention Text=ID', got {value!r}", param_hint=option)
    return text, entity_id


def build_mention_inputs(
    users: Optional[list[str]],
    channels: Optional[list[str]],
    mentions_json: Optional[Path],
) -> list[MentionInput]:
    """Collect mention inputs from --user, --channel and --mentions-json."""
    inputs: list[MentionInput] = []

    if mentions_json:
        data = json.loads(mentions_json.read_text())
        if not isinstance(data, list):
            raise typer.BadParameter("Expected a JSON array of mentions", param_hint="--mentions-json")
        inputs.extend(MentionInput.model_validate(item) for item in data)

    for value in users or []:
        text, user_id = _split_pair(value, "--user")
        inputs.append(MentionInput(mention=text, user_id=user_id))

    for value in channels or []:
        text, channel_id = _split_pair(value, "--channel")
        inputs.append(MentionInput(mention=text, channel_id=channel_id))

    return inputs


def _print_warnings(message: ComposedMessage) -> None:
    for warning in message.warnings:
        err_console.print(f"[yellow]Warning: {warning.message}[/yellow]")


def _fail(message: str) -> None:
    err_console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


async def _compose(
    message: str,
    format: str,
    importance: str,
    inputs: list[MentionInput],
    lookup: bool,
    allow_channel_mentions: bool = True,
) -> ComposedMessage:
    if not lookup:
        return await compose_message(
            message,
            format=format,
            importance=importance,
            mentions=inputs,
            allow_channel_mentions=allow_channel_mentions,
        )

    config = GraphConfig.from_env()
    async with GraphClient(config) as client:
        return await compose_message(
            message,
            format=format,
            importance=importance,
            mentions=inputs,
            directory=UserDirectory(client),
            allow_channel_mentions=allow_channel_mentions,
            timeout=config.timeout,
            max_concurrent=config.max_concurrent_lookups,
        )


USER_OPTION = typer.Option(
    None,
    "--user", "-u",
    help="User mention as 'Mention Text=USER_ID' (repeatable)",
)
CHANNEL_OPTION = typer.Option(
    None,
    "--channel", "-c",
    help="Channel mention as 'Mention Text=CHANNEL_ID' (repeatable)",
)
MENTIONS_JSON_OPTION = typer.Option(
    None,
    "--mentions-json",
    help="JSON file with an array of {mention, userId | channelId} objects",
    exists=True,
    dir_okay=False,
)
FORMAT_OPTION = typer.Option(
    "text",
    "--format", "-f",
    help="Message format: text or markdown",
)
IMPORTANCE_OPTION = typer.Option(
    "normal",
    "--importance", "-i",
    help="Message importance: normal, high or urgent",
)


@app.command("compose")
def compose_command(
    message: str = typer.Argument(..., help="Message text with @mentions"),
    users: Optional[list[str]] = USER_OPTION,
    channels: Optional[list[str]] = CHANNEL_OPTION,
    mentions_json: Optional[Path] = MENTIONS_JSON_OPTION,
    format: str = FORMAT_OPTION,
    importance: str = IMPORTANCE_OPTION,
    lookup: bool = typer.Option(
        False,
        "--lookup/--no-lookup",
        help="Look up user display names in Microsoft Graph",
    ),
):
    """
    Compose a message body with Teams mention markup and print the Graph payload.

    Examples:
        teams-mentions compose 'Hi @"John Doe"!' --user "John Doe=8b0e..."
        teams-mentions compose "@General standup" --channel "General=19:abc@thread.tacv2"
    """
    try:
        inputs = build_mention_inputs(users, channels, mentions_json)
        composed = asyncio.run(_compose(message, format, importance, inputs, lookup))
    except (MalformedMentionError, ConfigurationError, GraphError, ValueError) as e:
        _fail(str(e))

    _print_warnings(composed)
    typer.echo(json.dumps(composed.to_payload(), indent=2))


@app.command("send-channel")
def send_channel_command(
    team_id: str = typer.Argument(..., help="Team ID"),
    channel_id: str = typer.Argument(..., help="Channel ID"),
    message: str = typer.Argument(..., help="Message text with @mentions"),
    users: Optional[list[str]] = USER_OPTION,
    channels: Optional[list[str]] = CHANNEL_OPTION,
    mentions_json: Optional[Path] = MENTIONS_JSON_OPTION,
    format: str = FORMAT_OPTION,
    importance: str = IMPORTANCE_OPTION,
):
    """
    Send a message to a team channel. Supports user and channel mentions.
    """

    async def run():
        config = GraphConfig.from_env()
        async with GraphClient(config) as client:
            composed = await compose_message(
                message,
                format=format,
                importance=importance,
                mentions=inputs,
                directory=UserDirectory(client),
                timeout=config.timeout,
                max_concurrent=config.max_concurrent_lookups,
            )
            sent = await send_channel_message(client, team_id, channel_id, composed)
            return composed, sent

    try:
        inputs = build_mention_inputs(users, channels, mentions_json)
        with console.status("[bold green]Sending channel message..."):
            composed, sent = asyncio.run(run())
    except (MalformedMentionError, ConfigurationError, GraphError, ValueError) as e:
        _fail(str(e))

    _print_warnings(composed)
    console.print(f"[green]✓ Message sent[/green] (id: {sent.id})")
    if composed.mentions:
        console.print(f"Mentions: {', '.join(m.mention_text for m in composed.mentions)}")


@app.command("reply-channel")
def reply_channel_command(
    team_id: str = typer.Argument(..., help="Team ID"),
    channel_id: str = typer.Argument(..., help="Channel ID"),
    message_id: str = typer.Argument(..., help="ID of the message to reply to"),
    message: str = typer.Argument(..., help="Reply text with @mentions"),
    users: Optional[list[str]] = USER_OPTION,
    channels: Optional[list[str]] = CHANNEL_OPTION,
    mentions_json: Optional[Path] = MENTIONS_JSON_OPTION,
    format: str = FORMAT_OPTION,
    importance: str = IMPORTANCE_OPTION,
):
    """
    Reply to a message in a team channel.
    """

    async def run():
        config = GraphConfig.from_env()
        async with GraphClient(config) as client:
            composed = await compose_message(
                message,
                format=format,
                importance=importance,
                mentions=inputs,
                directory=UserDirectory(client),
                timeout=config.timeout,
                max_concurrent=config.max_concurrent_lookups,
            )
            sent = await send_channel_reply(client, team_id, channel_id, message_id, composed)
            return composed, sent

    try:
        inputs = build_mention_inputs(users, channels, mentions_json)
        with console.status("[bold green]Sending reply..."):
            composed, sent = asyncio.run(run())
    except (MalformedMentionError, ConfigurationError, GraphError, ValueError) as e:
        _fail(str(e))

    _print_warnings(composed)
    console.print(f"[green]✓ Reply sent[/green] (id: {sent.id})")
    if composed.mentions:
        console.print(f"Mentions: {', '.join(m.mention_text for m in composed.mentions)}")


@app.command("send-chat")
def send_chat_command(
    chat_id: str = typer.Argument(..., help="Chat ID"),
    message: str = typer.Argument(..., help="Message text with @mentions"),
    users: Optional[list[str]] = USER_OPTION,
    mentions_json: Optional[Path] = MENTIONS_JSON_OPTION,
    format: str = FORMAT_OPTION,
    importance: str = IMPORTANCE_OPTION,
):
    """
    Send a message to a chat. Only user mentions are supported in chats.
    """

    async def run():
        config = GraphConfig.from_env()
        async with GraphClient(config) as client:
            composed = await compose_message(
                message,
                format=format,
                importance=importance,
                mentions=inputs,
                directory=UserDirectory(client),
                allow_channel_mentions=False,
                timeout=config.timeout,
                max_concurrent=config.max_concurrent_lookups,
            )
            sent = await send_chat_message(client, chat_id, composed)
            return composed, sent

    try:
        inputs = build_mention_inputs(users, None, mentions_json)
        with console.status("[bold green]Sending chat message..."):
            composed, sent = asyncio.run(run())
    except (MalformedMentionError, ConfigurationError, GraphError, ValueError) as e:
        _fail(str(e))

    _print_warnings(composed)
    console.print(f"[green]✓ Message sent[/green] (id: {sent.id})")
    if composed.mentions:
        console.print(f"Mentions: {', '.join(m.mention_text for m in composed.mentions)}")


@app.command("search-users")
def search_users_command(
    query: str = typer.Argument(..., help="Name or email prefix"),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum number of users"),
):
    """
    Search users by display name or email prefix.
    """

    async def run():
        async with GraphClient(GraphConfig.from_env()) as client:
            return await UserDirectory(client).search_users(query, limit)

    try:
        users = asyncio.run(run())
    except ConfigurationError as e:
        _fail(str(e))

    if not users:
        console.print(f"[yellow]No users found matching '{query}'[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("Display Name", style="cyan")
    table.add_column("User Principal Name", style="green")
    table.add_column("ID", style="white")
    for user in users:
        table.add_row(user.display_name, user.user_principal_name or "", user.id)
    console.print(table)


@app.command("parse")
def parse_command(
    text: str = typer.Argument(..., help="Message text containing @mentions"),
):
    """
    Find @mentions in text and suggest matching users.
    """

    async def run():
        async with GraphClient(GraphConfig.from_env()) as client:
            return await parse_mentions(text, UserDirectory(client))

    try:
        candidates = asyncio.run(run())
    except ConfigurationError as e:
        _fail(str(e))

    if not candidates:
        console.print("[yellow]No @mentions found[/yellow]")
        return

    for candidate in candidates:
        console.print(f"\n[bold cyan]@{candidate.mention}[/bold cyan]")
        if not candidate.users:
            console.print("  [dim]no matching users[/dim]")
        for user in candidate.users:
            upn = f" <{user.user_principal_name}>" if user.user_principal_name else ""
            console.print(f"  {user.display_name}{upn}  [dim]{user.id}[/dim]")


@app.command("check-channel-id")
def check_channel_id_command(
    channel_id: str = typer.Argument(..., help="Channel ID to check"),
):
    """
    Check that a channel ID looks like 19:xxx@thread.tacv2.
    """
    if check_channel_id_format(channel_id, channel_id):
        console.print(f"[green]✓[/green] {channel_id}")
    else:
        console.print(f"[yellow]![/yellow] {channel_id} is not in the expected format 19:xxx@thread.tacv2")
        raise typer.Exit(1)


@app.command("version")
def version_command():
    """Show the version of teams-mentions."""
    from teams_mentions import __version__
    console.print(f"teams-mentions version {__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
