"""
Mention normalization.

Turns validated mention inputs into displayable mention mappings. User
display names are looked up in the directory; channel mentions are trusted
as given and only have their id shape checked. A failed lookup never fails
the message: the mention text is used as the display name instead.
"""

import asyncio
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from teams_mentions.config import (
    CHANNEL_ID_PATTERN,
    DEFAULT_LOOKUP_TIMEOUT,
    MAX_CONCURRENT_LOOKUPS,
)
from teams_mentions.mentions.models import MentionMapping
from teams_mentions.mentions.validation import (
    MentionInput,
    check_mention_inputs,
    coerce_mention_inputs,
    to_mention_mapping,
)

logger = logging.getLogger(__name__)

_CHANNEL_ID_RE = re.compile(CHANNEL_ID_PATTERN)

WarningKind = Literal["lookup_failed", "channel_id_format"]


class DirectoryLookup(Protocol):
    """Anything that can resolve a user id to a display name."""

    async def lookup_display_name(self, user_id: str) -> str | None: ...


@dataclass(frozen=True)
class MentionWarning:
    """A non-fatal problem found while resolving a mention."""

    mention: str
    kind: WarningKind
    message: str


@dataclass
class MentionResolution:
    """Resolved mappings (input order) plus any warnings raised on the way."""

    mappings: list[MentionMapping] = field(default_factory=list)
    warnings: list[MentionWarning] = field(default_factory=list)


def check_channel_id_format(channel_id: str, mention: str) -> bool:
    """
    Check that a channel id looks like ``19:xxx@thread.tacv2``.

    A mismatch is logged, not raised; the mention is still sent.
    """
    if _CHANNEL_ID_RE.match(channel_id):
        return True
    logger.warning(
        f'Channel mention "{mention}": Channel ID "{channel_id}" may not be in the expected format. '
        f'Expected format: "19:xxx@thread.tacv2". The mention may not work correctly.'
    )
    return False


async def _lookup_user_label(
    item: MentionInput,
    directory: DirectoryLookup,
    timeout: float,
) -> tuple[str, MentionWarning | None]:
    user_id = item.user_id or ""
    try:
        display_name = await asyncio.wait_for(directory.lookup_display_name(user_id), timeout)
    except asyncio.TimeoutError:
        reason = f"lookup timed out after {timeout}s"
    except Exception as e:
        reason = str(e) or type(e).__name__
    else:
        if display_name:
            logger.debug(f"Resolved user {user_id} to {display_name!r}")
            return display_name, None
        reason = "user not found"

    logger.warning(f"Could not resolve user {user_id} ({reason}), using mention text as display name")
    return item.mention, MentionWarning(
        mention=item.mention,
        kind="lookup_failed",
        message=f"Could not resolve user {user_id}: {reason}",
    )


async def resolve_mention(
    item: MentionInput,
    directory: DirectoryLookup | None = None,
    timeout: float = DEFAULT_LOOKUP_TIMEOUT,
) -> tuple[MentionMapping, MentionWarning | None]:
    """
    Resolve a single, already validated mention input.

    Args:
        item: The mention input
        directory: Directory used for user display names; when None, users
            keep their mention text as display name
        timeout: Seconds to wait for one lookup

    Returns:
        The mapping and an optional warning
    """
    if item.user_id:
        if directory is None:
            return to_mention_mapping(item), None
        label, warning = await _lookup_user_label(item, directory, timeout)
        return to_mention_mapping(item, display_name=label), warning

    warning = None
    if item.channel_id and not check_channel_id_format(item.channel_id, item.mention):
        warning = MentionWarning(
            mention=item.mention,
            kind="channel_id_format",
            message=f'Channel ID "{item.channel_id}" is not in the expected format "19:xxx@thread.tacv2"',
        )
    return to_mention_mapping(item), warning


async def resolve_mentions(
    inputs: Sequence[MentionInput | Mapping[str, Any]],
    directory: DirectoryLookup | None = None,
    timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    max_concurrent: int = MAX_CONCURRENT_LOOKUPS,
) -> MentionResolution:
    """
    Validate and resolve a list of mention inputs concurrently.

    Lookups run in parallel (at most ``max_concurrent`` at a time) and the
    result keeps the input order, which is what sequence ids are based on.

    Raises:
        MalformedMentionError: if any input has both ids or neither
    """
    items = coerce_mention_inputs(inputs)
    check_mention_inputs(items)
    if not items:
        return MentionResolution()

    semaphore = asyncio.Semaphore(max_concurrent)

    async def resolve_with_semaphore(item: MentionInput):
        async with semaphore:
            return await resolve_mention(item, directory, timeout)

    results = await asyncio.gather(*(resolve_with_semaphore(item) for item in items))

    resolution = MentionResolution()
    for mapping, warning in results:
        resolution.mappings.append(mapping)
        if warning is not None:
            resolution.warnings.append(warning)
    return resolution
