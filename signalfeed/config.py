"""Configuration loading: config.yaml merged over built-in defaults."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_SOURCES: list[dict[str, Any]] = [
    {"id": "hackernews", "type": "hackernews"},
    {"id": "reddit", "type": "reddit"},
    {"id": "devto", "type": "devto"},
]

DEFAULT_CONFIG: dict[str, Any] = {
    "sources": DEFAULT_SOURCES,
    "aggregation": {"request_timeout_seconds": None},
    "embedding": {
        "provider": "openai",
        "model": "text-embedding-3-small",
        "dimensions": 256,
        "local_url": "http://localhost:11434/v1",
    },
    "llm": {
        "provider": "openai",
        "model": "gpt-4o-mini",
        "max_tokens": 150,
        "temperature": 0.7,
        "batch_size": 5,
        "cache_summaries": True,
        "max_cached_summaries": 1000,
        "local_url": "http://localhost:11434/v1",
        "local_model": "llama3.2",
        "anthropic_model": "claude-haiku-4-5-20251001",
    },
    "rate_limit": {
        "window_seconds": 60,
        "max_requests": 10,
        "cleanup_interval_seconds": 60,
    },
    "dedup": {"max_age_seconds": 30},
    "server": {"host": "0.0.0.0", "port": 4000},
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``. Lists are replaced, not merged."""
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load the YAML configuration and merge it over the defaults.

    A missing file is not an error: the defaults alone are returned.
    """
    config_path = Path(path or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.info("Config %s not found, using defaults", config_path)
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config {config_path} must be a mapping, got {type(loaded).__name__}")
    return _merge(DEFAULT_CONFIG, loaded)
