"""Input validation for search topics and article URLs."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from signalfeed.errors import InvalidTopicError

MIN_TOPIC_LENGTH = 2
MAX_TOPIC_LENGTH = 200

_SUSPICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
]
_SPECIAL_CHARS = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")


def validate_topic(topic: str) -> str:
    """Return the trimmed topic, or raise InvalidTopicError explaining why it was rejected."""
    trimmed = (topic or "").strip()
    if not trimmed:
        raise InvalidTopicError("Please enter a topic to search for")
    if len(trimmed) < MIN_TOPIC_LENGTH:
        raise InvalidTopicError(f"Topic must be at least {MIN_TOPIC_LENGTH} characters long")
    if len(trimmed) > MAX_TOPIC_LENGTH:
        raise InvalidTopicError(f"Topic must be less than {MAX_TOPIC_LENGTH} characters")
    if any(p.search(trimmed) for p in _SUSPICIOUS_PATTERNS):
        raise InvalidTopicError("Invalid characters detected in search query")
    if len(_SPECIAL_CHARS.findall(trimmed)) > len(trimmed) * 0.5:
        raise InvalidTopicError("Search query contains too many special characters")
    return trimmed


def sanitize_topic(topic: str) -> str:
    """Strip angle brackets and ``javascript:`` and cap the length."""
    cleaned = re.sub(r"[<>]", "", topic.strip())
    cleaned = re.sub(r"javascript:", "", cleaned, flags=re.IGNORECASE)
    return cleaned[:MAX_TOPIC_LENGTH]


def is_valid_url(url: str | None) -> bool:
    """True for absolute http(s) URLs only."""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
