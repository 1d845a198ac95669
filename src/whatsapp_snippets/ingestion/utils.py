"""Logging helpers for the ingestion package."""

import textwrap

from .snippet import Snippet


def _snippet_preview(snippet: Snippet, *, width: int = 40) -> str:
    """Return a compact one-line summary for logs: e.g., text:'Hello…'."""
    body = textwrap.shorten(snippet.content, width=width, placeholder="…")
    return f"{snippet.message_type}:'{body}'"
