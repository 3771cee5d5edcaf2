"""Parsing of the newline-separated source feed."""

from __future__ import annotations

import re

_LINE_BREAK = re.compile(r"\r?\n")


def parse_url_list(text: str | None) -> list[str]:
    """Split the feed on line breaks, trim each line and drop blanks.

    Order is preserved and duplicates are kept; the scheduler walks the list
    as-is and the result store deduplicates.
    """
    if not text:
        return []
    return [line.strip() for line in _LINE_BREAK.split(text) if line.strip()]
