"""
Tests for the server entry point

These tests verify command line parsing and logging setup.

Run with: python -m pytest tests/test_cli.py -v
"""

import json
import logging

import pytest
import structlog

from htcache import __version__
from htcache.config.settings import settings
from htcache.server import main, parse_args, setup_logging


def reset_logging():
    """Undo setup_logging() so later tests see default logging."""
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


class TestParseArgs:
    """Test parse_args()."""

    def test_defaults(self):
        args = parse_args([])
        assert args.addr == settings.HOST
        assert args.port == settings.PORT
        assert args.capacity == settings.CAPACITY
        assert args.gc_interval == settings.GC_INTERVAL
        assert args.ecs_logging is settings.ECS_LOGGING

    def test_short_options(self):
        args = parse_args(["-a", "0.0.0.0", "-p", "8080"])
        assert args.addr == "0.0.0.0"
        assert args.port == 8080

    def test_long_options(self):
        args = parse_args([
            "--addr", "::1",
            "--port", "9000",
            "--ecs-logging",
            "--capacity", "1024",
            "--gc-interval", "5",
            "--debug",
        ])
        assert args.addr == "::1"
        assert args.port == 9000
        assert args.ecs_logging is True
        assert args.capacity == 1024
        assert args.gc_interval == 5.0
        assert args.debug is True

    @pytest.mark.parametrize("argv", [
        ["--addr", "localhost"],
        ["--addr", "999.1.1.1"],
        ["--port", "http"],
        ["--port", "70000"],
    ])
    def test_invalid_values(self, argv):
        with pytest.raises(SystemExit):
            parse_args(argv)

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestSetupLogging:
    """Test setup_logging()."""

    def teardown_method(self):
        reset_logging()

    def test_ecs_logging_renders_json(self, capsys):
        setup_logging(ecs_logging=True)
        structlog.get_logger("test").info("hello", key="value")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "hello"
        assert event["key"] == "value"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_plain_logging_is_not_json(self, capsys):
        setup_logging(ecs_logging=False)
        structlog.get_logger("test").info("hello", key="value")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        assert "hello" in line
        with pytest.raises(ValueError):
            json.loads(line)

    def test_debug_level(self):
        setup_logging(debug=True)
        assert logging.getLogger().level == logging.DEBUG

        setup_logging(debug=False)
        assert logging.getLogger().level == logging.INFO


class TestMain:
    """Test main() wiring without binding a socket."""

    def teardown_method(self):
        reset_logging()

    def test_main_builds_server(self, monkeypatch):
        started = {}

        async def fake_start(self):
            started["server"] = self

        monkeypatch.setattr("htcache.server.HTCacheServer.start", fake_start)

        main(["--port", "4040", "--capacity", "16", "--gc-interval", "2"])

        server = started["server"]
        assert server.port == 4040
        assert server.store.capacity_target == 16
        assert server.app.state.reaper.interval == 2.0
