"""Tests for configuration loading, topic validation and the CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner
from rich.console import Console

from signalfeed.config import DEFAULT_CONFIG, load_config
from signalfeed.errors import InvalidTopicError
from signalfeed.models import DataSource, FeedItem
from signalfeed.pipeline.cli import cli
from signalfeed.validation import is_valid_url, sanitize_topic, validate_topic


@pytest.fixture
def config_path(tmp_path):
    config = {
        "sources": [
            {"id": "hn", "type": "hackernews"},
            {"id": "lobsters", "type": "lobsters"},
            {"id": "github", "type": "github", "enabled": False},
        ],
        "llm": {"provider": "mock"},
        "embedding": {"provider": "mock"},
        "rate_limit": {"max_requests": 3},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config))
    return str(path)


# --- Config ---

class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == DEFAULT_CONFIG

    def test_merges_over_defaults(self, config_path):
        config = load_config(config_path)
        assert config["rate_limit"]["max_requests"] == 3
        assert config["rate_limit"]["window_seconds"] == 60
        assert config["llm"]["batch_size"] == 5
        assert [s["id"] for s in config["sources"]] == ["hn", "lobsters", "github"]

    def test_defaults_are_not_mutated(self, config_path):
        load_config(config_path)["llm"]["provider"] = "changed"
        assert DEFAULT_CONFIG["llm"]["provider"] == "openai"

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(path)


# --- Validation ---

class TestValidation:
    def test_valid_topic_is_trimmed(self):
        assert validate_topic("  react performance ") == "react performance"

    @pytest.mark.parametrize(
        "topic",
        ["", "   ", "a", "x" * 201, "javascript:alert(1)", "img onerror=boom", "data:text/html,hi", "#$%^&*"],
    )
    def test_rejected_topics(self, topic):
        with pytest.raises(InvalidTopicError):
            validate_topic(topic)

    def test_sanitize(self):
        assert sanitize_topic(" <b>rust</b> ") == "brust/b"
        assert len(sanitize_topic("y" * 500)) == 200

    def test_is_valid_url(self):
        assert is_valid_url("https://example.com/a")
        assert is_valid_url("http://example.com")
        assert not is_valid_url("ftp://example.com")
        assert not is_valid_url("example.com")
        assert not is_valid_url(None)


# --- CLI ---

class TestCLI:
    def test_sources_lists_enabled_in_order(self, config_path, monkeypatch):
        monkeypatch.setattr("signalfeed.pipeline.cli.console", Console(width=200))
        result = CliRunner().invoke(cli, ["--config", config_path, "sources"])
        assert result.exit_code == 0, result.output
        assert result.output.index("hn") < result.output.index("lobsters")
        assert "github" not in result.output

    def test_feed_rejects_invalid_topic(self, config_path):
        result = CliRunner().invoke(cli, ["--config", config_path, "feed", "x"])
        assert result.exit_code == 1
        assert "at least 2 characters" in result.output

    def test_feed_json_output(self, config_path):
        item = FeedItem(
            id="hn-1", title="Rust", url="https://example.com", created_at="2025-01-01T00:00:00Z",
            source=DataSource.HACKERNEWS, summary="s", score=0.5, relevance_score=0.5,
            recency_score=0.5, popularity_score=0.5, explanation="Relevance: 50% | Recency: 50% | Popularity: 50%",
        )
        with patch(
            "signalfeed.pipeline.service.FeedService.get_ranked_feed",
            new=AsyncMock(return_value=[item]),
        ) as get_feed:
            result = CliRunner().invoke(cli, ["--config", config_path, "feed", "rust", "--json"])
        assert result.exit_code == 0, result.output
        payload, _ = json.JSONDecoder().raw_decode(result.output, result.output.index("[\n  {"))
        assert payload[0]["id"] == "hn-1"
        get_feed.assert_awaited_once_with("rust")
