"""Tests for the command line front end."""

import json
import logging
import sys

import shimtabs
import shimtabs.__main__ as cli
from shimtabs.__main__ import build_parser, main
from shimtabs.config_manager import ConfigManager
from tests.fake_shim import free_port


def write_config(tmp_path):
    path = tmp_path / "shimtabs_config.json"
    ConfigManager(str(path)).update_settings({"port": free_port(), "connect_timeout": 0.5})
    return str(path)


class TestCli:
    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.query == ""
        assert args.activate is None
        assert not args.json

    def test_json_output_when_shim_down(self, tmp_path, capsys):
        code = main(["--json", "--config", write_config(tmp_path), "--plugin-dir", str(tmp_path)])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_activate_out_of_range(self, tmp_path, capsys):
        code = main(
            [
                "tab",
                "--activate",
                "1",
                "--config",
                write_config(tmp_path),
                "--plugin-dir",
                str(tmp_path),
            ]
        )

        assert code == 1
        assert "No result number 1" in capsys.readouterr().err

    def test_verbose_json_logs_go_to_stderr(self, tmp_path, monkeypatch, capsys):
        calls = []
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: calls.append(kwargs))

        code = main(
            ["--json", "-v", "--config", write_config(tmp_path), "--plugin-dir", str(tmp_path)]
        )

        assert code == 0
        assert calls[0]["stream"] is sys.stderr
        assert json.loads(capsys.readouterr().out) == []


class TestSetupLogging:
    def test_console_handler_uses_given_stream(self, tmp_path, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        shimtabs.setup_logging(log_file=str(tmp_path / "x.log"), stream=sys.stderr)

        handlers = captured["handlers"]
        try:
            stream_handlers = [
                h for h in handlers if type(h) is logging.StreamHandler
            ]
            assert [h.stream for h in stream_handlers] == [sys.stderr]
        finally:
            for handler in handlers:
                handler.close()

    def test_console_handler_defaults_to_stdout(self, tmp_path, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        shimtabs.setup_logging(log_file=str(tmp_path / "x.log"))

        handlers = captured["handlers"]
        try:
            stream_handlers = [
                h for h in handlers if type(h) is logging.StreamHandler
            ]
            assert [h.stream for h in stream_handlers] == [sys.stdout]
        finally:
            for handler in handlers:
                handler.close()
