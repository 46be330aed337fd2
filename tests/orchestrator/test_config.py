"""
Orchestrator Configuration and CLI Tests.

============================================================
PURPOSE
============================================================
Environment loading, duration parsing and startup exit codes.

============================================================
"""

import json
import logging

import pytest

from core.exceptions import InvalidConfigError, MissingConfigError
from orchestrator import ExporterConfig, create_parser, format_duration, main, parse_duration
from orchestrator import cli
from orchestrator import config as config_module


BASE_ENV = {
    "NEW_RELIC_ACCOUNT": "12345",
    "ENTITY_GUID": "ENTITY",
    "NEW_RELIC_LICENSE_KEY": "license-abcdef",
    "NEW_RELIC_USER_KEY": "NRAK-secret",
}


# ============================================================
# DURATIONS
# ============================================================

class TestParseDuration:
    """Tests for parse_duration()."""

    @pytest.mark.parametrize("value,expected", [
        ("5m", 300.0),
        ("90s", 90.0),
        ("1h30m", 5400.0),
        ("1.5h", 5400.0),
        ("300ms", 0.3),
        ("0", 0.0),
        ("-2s", -2.0),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "5", "abc", "5 m", "m5", "1d"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

    def test_format(self):
        assert format_duration(300) == "5m0s"
        assert format_duration(5400) == "1h30m0s"
        assert format_duration(45) == "45s"


# ============================================================
# ENVIRONMENT
# ============================================================

class TestFromEnv:
    """Tests for ExporterConfig.from_env()."""

    def test_defaults(self):
        config = ExporterConfig.from_env(BASE_ENV)

        assert config.account_id == "12345"
        assert config.entity_guid == "ENTITY"
        assert config.poll_interval_seconds == 300.0
        assert config.session_cookie is None
        assert config.validate() == []

    def test_interval_and_overrides(self):
        env = dict(
            BASE_ENV,
            POLL_INTERVAL="1m",
            NEW_RELIC_SESSION_COOKIE="sid=1",
            METRIC_ENDPOINT="https://metrics.test",
            LOG_FORMAT="json",
        )

        config = ExporterConfig.from_env(env)

        assert config.poll_interval_seconds == 60.0
        assert config.session_cookie == "sid=1"
        assert config.metric_endpoint == "https://metrics.test"
        assert config.log_format == "json"

    @pytest.mark.parametrize("key", [
        "NEW_RELIC_ACCOUNT",
        "ENTITY_GUID",
        "NEW_RELIC_LICENSE_KEY",
        "NEW_RELIC_USER_KEY",
    ])
    def test_missing_required(self, key):
        env = dict(BASE_ENV)
        del env[key]

        with pytest.raises(MissingConfigError) as exc_info:
            ExporterConfig.from_env(env)

        assert exc_info.value.config_key == key
        assert key in exc_info.value.message

    def test_empty_value_counts_as_missing(self):
        with pytest.raises(MissingConfigError):
            ExporterConfig.from_env(dict(BASE_ENV, ENTITY_GUID=""))

    @pytest.mark.parametrize("interval", ["often", "0", "-5m"])
    def test_invalid_interval(self, interval):
        with pytest.raises(InvalidConfigError) as exc_info:
            ExporterConfig.from_env(dict(BASE_ENV, POLL_INTERVAL=interval))

        assert exc_info.value.config_key == "POLL_INTERVAL"

    def test_secrets_masked(self):
        data = ExporterConfig.from_env(BASE_ENV).to_dict()

        assert data["license_key"] == "lice****"
        assert data["user_key"] == "NRAK****"
        assert data["poll_interval"] == "5m0s"

    def test_bad_log_format_is_invalid(self):
        config = ExporterConfig.from_env(dict(BASE_ENV, LOG_FORMAT="xml"))

        assert config.validate()


# ============================================================
# CLI
# ============================================================

class TestCli:
    """Tests for the CLI entry point."""

    def test_parser_defaults(self):
        args = create_parser().parse_args([])

        assert args.once is False
        assert args.log_level is None

    def test_missing_config_exits_nonzero(self, monkeypatch):
        for key in BASE_ENV:
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setattr(config_module, "load_dotenv", lambda: None)

        assert main([]) == 1

    def test_invalid_interval_exits_nonzero(self, monkeypatch):
        for key, value in BASE_ENV.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setenv("POLL_INTERVAL", "soon")
        monkeypatch.setattr(config_module, "load_dotenv", lambda: None)

        assert main([]) == 1

    def test_once_runs_single_cycle(self, monkeypatch):
        calls = []

        async def fake_async_main(config, once=False):
            calls.append((config.entity_guid, once))
            return 0

        monkeypatch.setattr(
            cli.ExporterConfig, "from_env", classmethod(lambda c: ExporterConfig(
                account_id="1", entity_guid="E", license_key="l", user_key="u",
            ))
        )
        monkeypatch.setattr(cli, "async_main", fake_async_main)

        assert main(["--once"]) == 0
        assert calls == [("E", True)]


class TestJsonFormatter:
    """Tests for the JSON log line formatter."""

    def test_message_with_quotes_is_valid_json(self):
        record = logging.LogRecord(
            "metric_pipeline.publisher", logging.INFO, __file__, 1,
            'Submitted {"requestId": "%s"}', ("abc",), None,
        )

        line = cli.JsonFormatter().format(record)

        entry = json.loads(line)
        assert entry["message"] == 'Submitted {"requestId": "abc"}'
        assert entry["level"] == "INFO"
        assert entry["logger"] == "metric_pipeline.publisher"

    def test_setup_logging_uses_json_formatter(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            cli.setup_logging("DEBUG", "json")

            assert isinstance(root.handlers[0].formatter, cli.JsonFormatter)
            assert root.level == logging.DEBUG
        finally:
            root.handlers = saved[0]
            root.setLevel(saved[1])
