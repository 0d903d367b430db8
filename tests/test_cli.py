"""
Tests for calicapture.cli and calicapture.logger.
"""

import sys

from calicapture import cli, logger
from calicapture.config import load_session_config
from calicapture.types import PatternType


class TestCli:
    def test_help(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["calicapture", "--help"])
        assert cli.main() == 0
        assert "calicapture init" in capsys.readouterr().out

    def test_init_writes_default_config(self, monkeypatch, temp_dir):
        path = temp_dir / "session.toml"
        monkeypatch.setattr(sys, "argv", ["calicapture", "init", str(path)])

        assert cli.main() == 0

        config = load_session_config(path)
        assert config.board.pattern is PatternType.CHESSBOARD
        assert config.capture.needed_frames == 20

    def test_init_requires_path(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["calicapture", "init"])
        assert cli.main() == 1

    def test_invalid_config_exits_with_error(self, monkeypatch, temp_dir):
        path = temp_dir / "bad.toml"
        path.write_text('[board]\npattern = "triangles"\n')
        monkeypatch.setattr(sys, "argv", ["calicapture", "capture", str(path)])
        assert cli.main() == 1

    def test_wrongly_typed_config_exits_with_error(self, monkeypatch, temp_dir):
        path = temp_dir / "typed.toml"
        path.write_text('[board]\npattern = "chessboard"\ncolumns = "9"\n')
        monkeypatch.setattr(sys, "argv", ["calicapture", "capture", str(path)])
        assert cli.main() == 1

    def test_unknown_command(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["calicapture", "record"])
        assert cli.main() == 1


class TestLogger:
    def test_names_are_under_package_root(self):
        assert logger.get("calicapture.session").name == "calicapture.session"
        assert logger.get("scripts.tool").name == "calicapture.scripts.tool"

    def test_root_configured_once(self):
        logger.get("a")
        logger.get("b")
        root = logger.get("calicapture")
        assert len(root.handlers) == 1
