#!/usr/bin/env python3
"""
calicapture CLI - interactive camera calibration capture.

Usage:
    calicapture                              - Capture with the default 9x6 chessboard
    calicapture capture [config.toml] [out]  - Capture, then calibrate and preview
    calicapture preview [config.toml] [out]  - Preview a saved calibration
    calicapture init <config.toml>           - Write a default session config
    calicapture --help                       - Show this help
"""

import sys
from pathlib import Path

from . import logger as _logger
from .config import create_default_session_config, load_session_config, save_session_config

logger = _logger.get(__name__)


def _load_config(args: list[str]):
    if args:
        return load_session_config(Path(args[0]))
    return create_default_session_config()


def _output_path(args: list[str]) -> Path | None:
    return Path(args[1]) if len(args) > 1 else None


def main():
    if len(sys.argv) < 2:
        from calicapture.gui.main import main as gui_main
        return gui_main()

    if sys.argv[1] in ("-h", "--help"):
        print(__doc__)
        print("Keys: R reset, Space capture/preview, S save calibration, Esc quit")
        print()
        return 0

    command = sys.argv[1]
    args = sys.argv[2:]

    if command == "init":
        if not args:
            print("Usage: calicapture init <config.toml>")
            return 1
        path = Path(args[0])
        save_session_config(create_default_session_config(), path)
        print(f"Wrote default config to {path}")
        return 0

    if command in ("capture", "preview"):
        try:
            config = _load_config(args)
        except (OSError, ValueError) as e:
            logger.error(f"Invalid configuration: {e}")
            return 1

        from calicapture.gui.main import main as gui_main
        return gui_main(
            config,
            _output_path(args),
            start_in_preview=(command == "preview"),
        )

    print(f"Unknown command: {command}")
    print("Run 'calicapture --help' for usage")
    return 1


if __name__ == "__main__":
    sys.exit(main())
