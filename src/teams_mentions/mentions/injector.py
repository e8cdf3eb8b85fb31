"""
Mention markup injection.

Rewrites ``@mention`` / ``@"mention"`` occurrences in rendered HTML into
Teams ``<at id="N">Name</at>`` spans and builds the matching Graph mention
records. Must run after markdown rendering.
"""

import html
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from teams_mentions.mentions.models import GraphMention, MentionMapping

logger = logging.getLogger(__name__)


@dataclass
class InjectionResult:
    """HTML content with <at> spans and the Graph mentions they refer to."""

    content: str
    mentions: list[GraphMention] = field(default_factory=list)


def build_mention_pattern(mention: str) -> re.Pattern[str]:
    """
    Build the regex matching ``@"mention"`` and, when unambiguous, ``@mention``.

    Mention text is matched literally and case-sensitively, either as given
    or in its HTML-escaped form. Text containing whitespace only matches in
    its quoted form.
    """
    variants = dict.fromkeys([mention, html.escape(mention, quote=False)])
    escaped = "|".join(re.escape(variant) for variant in variants)
    if len(variants) > 1:
        escaped = f"(?:{escaped})"
    if any(ch.isspace() for ch in mention):
        return re.compile(f'@"{escaped}"')
    return re.compile(f'@(?:"{escaped}"|{escaped})')


def mention_span(sequence_id: int, display_name: str) -> str:
    return f'<at id="{sequence_id}">{html.escape(display_name, quote=False)}</at>'


def _warn_on_overlaps(mappings: Sequence[MentionMapping]) -> None:
    texts = [m.mention for m in mappings]
    for i, outer in enumerate(texts):
        for j, inner in enumerate(texts):
            if i != j and inner and inner != outer and inner in outer:
                logger.warning(
                    f'Mention "{inner}" is contained in mention "{outer}"; '
                    f"the replacement result depends on mention order"
                )


def process_mentions_in_html(html: str, mappings: Sequence[MentionMapping]) -> InjectionResult:
    """
    Replace @mentions in HTML with Teams mention markup.

    The mapping at position ``i`` gets sequence id ``i`` no matter where (or
    whether) its text occurs. Every occurrence is replaced with the same
    span, and exactly one Graph mention is emitted per mapping, in input
    order.

    Args:
        html: Rendered message content
        mappings: Resolved user and channel mention mappings

    Returns:
        InjectionResult with rewritten content and Graph mentions
    """
    if not mappings:
        return InjectionResult(content=html)

    _warn_on_overlaps(mappings)

    content = html
    mentions: list[GraphMention] = []

    for sequence_id, mapping in enumerate(mappings):
        pattern = build_mention_pattern(mapping.mention)
        span = mention_span(sequence_id, mapping.display_name)
        content, count = pattern.subn(lambda _match: span, content)
        if count == 0:
            logger.debug(f'Mention "{mapping.mention}" not found in message content')

        mentions.append(GraphMention.for_mapping(sequence_id, mapping))

    return InjectionResult(content=content, mentions=mentions)
