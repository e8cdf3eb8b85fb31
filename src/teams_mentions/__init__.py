"""
Teams Mentions - compose Microsoft Teams messages with @mentions.

Validates user and channel mention inputs, resolves user display names
through Microsoft Graph, and rewrites message HTML with Teams ``<at>``
markup alongside the matching Graph mention records.
"""

__version__ = "0.1.0"

# Lazy imports via PEP 562 so that `import teams_mentions` stays cheap and
# does not pull in httpx, markdown, and pydantic until they are used.
_LAZY_IMPORTS = {
    "ComposedMessage": "teams_mentions.composer",
    "compose_message": "teams_mentions.composer",
    "MalformedMentionError": "teams_mentions.mentions.validation",
    "MentionInput": "teams_mentions.mentions.validation",
    "process_mentions_in_html": "teams_mentions.mentions.injector",
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        import importlib

        module = importlib.import_module(_LAZY_IMPORTS[name])
        value = getattr(module, name)
        globals()[name] = value  # cache for subsequent access
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ComposedMessage",
    "MalformedMentionError",
    "MentionInput",
    "compose_message",
    "process_mentions_in_html",
    "__version__",
]
