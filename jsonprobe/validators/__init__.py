"""Content classifiers and source feed parsing."""

from jsonprobe.validators.content import (
    CAPTCHA_MARKERS,
    is_captcha,
    is_json,
    is_json_success,
)
from jsonprobe.validators.source_list import parse_url_list

__all__ = [
    "CAPTCHA_MARKERS",
    "is_captcha",
    "is_json",
    "is_json_success",
    "parse_url_list",
]
