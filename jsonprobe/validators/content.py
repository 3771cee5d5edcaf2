"""Response body classification.

Two heuristics decide whether a fetched body counts as a JSON hit:
``is_captcha`` flags anti-bot interstitials by marker phrase and
``is_json`` requires a strict, total JSON parse. A body only counts when
the fetch completed, no challenge marker is present and it parses.
"""

from __future__ import annotations

import json

from jsonprobe.models.outcomes import FetchResult

CAPTCHA_MARKERS: tuple[str, ...] = (
    "captcha",
    "verify you are human",
    "verification",
    "robot",
    "cloudflare",
)


def _reject_constant(name: str) -> None:
    # NaN / Infinity are Python extensions, not JSON
    raise ValueError(f"Non-standard JSON constant: {name}")


def is_json(text: str | None) -> bool:
    """Return True only if *text* is a complete, standard JSON document."""
    if not text or not text.strip():
        return False
    try:
        json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False
    return True


def is_captcha(text: str | None) -> bool:
    """Return True if *text* looks like a bot-challenge page."""
    if not text:
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in CAPTCHA_MARKERS)


def is_json_success(result: FetchResult) -> bool:
    """A fetch counts as a JSON hit: completed, not a challenge, parses."""
    return result.ok and not is_captcha(result.text) and is_json(result.text)
