"""CLI tests.

Covers argument parsing, help output and exit code translation.
"""

from __future__ import annotations

import logging
import os
from unittest import mock

import pytest

from simulta import cli
from simulta.config import Config, FramingPolicy, reload_config


@pytest.fixture(autouse=True)
def plain_config():
    """Fresh configuration with plain sh and no debug log."""
    env = {"SHELL": "/bin/sh", "SIMULTA_LOG_DEBUG": "", "SIMULTA_FRAMING": ""}
    with mock.patch.dict(os.environ, env, clear=False):
        reload_config()
        yield
    reload_config()


class TestParser:
    """Argument parsing."""

    def test_options(self):
        args = cli.build_parser().parse_intermixed_args(
            ["--prefix", "--names", "a,b", "echo 1", "echo 2"]
        )

        assert args.prefix is True
        assert args.names == "a,b"
        assert args.commands == ["echo 1", "echo 2"]

    def test_options_after_commands(self):
        args = cli.build_parser().parse_intermixed_args(["echo 1", "--prefix", "echo 2"])

        assert args.prefix is True
        assert args.commands == ["echo 1", "echo 2"]

    def test_framing_choice(self):
        args = cli.build_parser().parse_intermixed_args(["--framing", "chunk", "true"])
        assert args.framing == "chunk"

    def test_invalid_framing_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_intermixed_args(["--framing", "bogus", "true"])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize(
        "value,expected",
        [(None, None), ("a", ["a"]), ("a,b,c", ["a", "b", "c"])],
    )
    def test_parse_names(self, value, expected):
        assert cli.parse_names(value) == expected


class TestMain:
    """Exit codes and output."""

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--help"])

        assert exc_info.value.code == 0
        assert "--prefix" in capsys.readouterr().out

    def test_no_commands_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "run multiple commands simultaneously" in capsys.readouterr().out

    def test_success(self, capfdbinary):
        assert cli.main(["echo hi"]) == 0

        captured = capfdbinary.readouterr()
        assert captured.out == b"hi\x1b[0m\n"
        assert captured.err == b""

    def test_prefixed_names(self, capfdbinary):
        assert cli.main(["--prefix", "--names", "out,err", "echo a", ">&2 echo b"]) == 0

        captured = capfdbinary.readouterr()
        assert captured.out == b"[out] | a\x1b[0m\n"
        assert captured.err == b"[err] | b\x1b[0m\n"

    def test_runtime_failure_is_silent(self, capfdbinary):
        assert cli.main(["false"]) == 1

        captured = capfdbinary.readouterr()
        assert captured.out == b""
        assert captured.err == b""

    def test_validation_failure_prints_message(self, capfdbinary):
        assert cli.main(["--names", "a,b,c", "true"]) == 1

        captured = capfdbinary.readouterr()
        assert captured.out == b""
        assert captured.err == b"--names options provided, but 3 names were given for 1 commands\n"


class TestConfigureLogging:
    """Logging setup."""

    def test_debug_file(self, tmp_path):
        log_file = tmp_path / "debug.log"
        root = logging.getLogger()
        saved = root.handlers[:]
        root.handlers.clear()
        try:
            cli.configure_logging(Config(log_debug=True, log_file=str(log_file)))
            assert logging.getLogger("simulta").level == logging.DEBUG
            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved
            logging.getLogger("simulta").setLevel(logging.NOTSET)

    def test_default_warning_level(self):
        root = logging.getLogger()
        saved = root.handlers[:]
        root.handlers.clear()
        try:
            cli.configure_logging(Config(framing=FramingPolicy.LINE))
            assert logging.getLogger("simulta").level == logging.WARNING
        finally:
            root.handlers[:] = saved
            logging.getLogger("simulta").setLevel(logging.NOTSET)
