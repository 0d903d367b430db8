"""
Configuration loading/saving.

Pure functions operating on dataclasses.
- TOML session configuration (board + capture policy)
- TOML calibration results (camera matrix, distortion, RMS)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import rtoml

from .types import BoardConfig, CalibrationDataset, CaptureConfig, PatternType

DEFAULT_NEEDED_FRAMES = 20  # Written by `calicapture init`, used when [capture] omits it


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """
    Everything needed to start a capture session.
    Loaded from a TOML file with [board] and [capture] sections.
    """

    board: BoardConfig
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    camera: int = 0  # cv2.VideoCapture index

    def __post_init__(self):
        if isinstance(self.camera, bool) or not isinstance(self.camera, int):
            raise ValueError(f"camera must be a device index, got {self.camera!r}")


# ============================================================================
# Session Configuration
# ============================================================================


def _parse_pattern(name) -> PatternType:
    try:
        return PatternType(name)
    except ValueError:
        valid = ", ".join(p.value for p in PatternType)
        raise ValueError(f"Unknown pattern '{name}' (expected one of: {valid})") from None


def _parse_pair(name: str, value) -> tuple:
    """TOML arrays arrive as lists; BoardConfig/CaptureConfig want tuples."""
    if not isinstance(value, list) or len(value) != 2:
        raise ValueError(f"{name} must be an array of two integers, got {value!r}")
    return tuple(value)


def load_session_config(path: Path) -> SessionConfig:
    """
    Load session configuration from TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        SessionConfig dataclass

    Raises:
        ValueError: If the board or capture settings are invalid
    """
    data = rtoml.load(path)

    board_data = data.get("board", {})
    capture_data = data.get("capture", {})
    if not isinstance(board_data, dict) or not isinstance(capture_data, dict):
        raise ValueError("[board] and [capture] must be tables")

    board = BoardConfig(
        pattern=_parse_pattern(board_data.get("pattern", "chessboard")),
        columns=board_data.get("columns", 9),
        rows=board_data.get("rows", 6),
        square_size=board_data.get("square_size", 16.3),
        grid_distance=board_data.get("grid_distance", 295.0),
        charuco_squares=_parse_pair("charuco_squares", board_data.get("charuco_squares", [6, 8])),
        charuco_square_length=board_data.get("charuco_square_length", 200.0),
        charuco_marker_length=board_data.get("charuco_marker_length", 100.0),
        dictionary=board_data.get("dictionary", "DICT_4X4_50"),
        legacy_pattern=board_data.get("legacy_pattern", False),
    )

    capture = CaptureConfig(
        resolution=_parse_pair("resolution", capture_data.get("resolution", [1280, 960])),
        delay_between_captures=capture_data.get("delay_between_captures", 30),
        needed_frames=capture_data.get("needed_frames", DEFAULT_NEEDED_FRAMES),
        capture_pause_ms=capture_data.get("capture_pause_ms", 300),
    )

    return SessionConfig(
        board=board,
        capture=capture,
        camera=data.get("camera", 0),
    )


def save_session_config(config: SessionConfig, path: Path) -> None:
    """
    Save session configuration to TOML file.

    Args:
        config: SessionConfig dataclass
        path: Path to save config.toml
    """
    board = config.board
    capture = config.capture

    data = {
        "camera": config.camera,
        "board": {
            "pattern": board.pattern.value,
            "columns": board.columns,
            "rows": board.rows,
            "square_size": board.square_size,
            "grid_distance": board.grid_distance,
            "charuco_squares": list(board.charuco_squares),
            "charuco_square_length": board.charuco_square_length,
            "charuco_marker_length": board.charuco_marker_length,
            "dictionary": board.dictionary,
            "legacy_pattern": board.legacy_pattern,
        },
        "capture": {
            "resolution": list(capture.resolution),
            "delay_between_captures": capture.delay_between_captures,
            "needed_frames": capture.needed_frames,
            "capture_pause_ms": capture.capture_pause_ms,
        },
    }

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def create_default_session_config() -> SessionConfig:
    """
    Default session: 9x6 chessboard, 20 captures at 1280x960.
    """
    return SessionConfig(
        board=BoardConfig(pattern=PatternType.CHESSBOARD, columns=9, rows=6),
        capture=CaptureConfig(needed_frames=DEFAULT_NEEDED_FRAMES),
    )


# ============================================================================
# Calibration Results
# ============================================================================


def save_calibration_to_toml(
    dataset: CalibrationDataset,
    path: Path,
    resolution: tuple[int, int],
) -> None:
    """
    Save the dataset's calibration result to a TOML file.

    Args:
        dataset: Calibrated dataset
        path: Path to calibration.toml file
        resolution: (width, height) the calibration applies to

    Raises:
        ValueError: If the dataset has not been calibrated
    """
    if not dataset.is_calibrated:
        raise ValueError("Dataset has no calibration to save")

    data = {
        "calibration": {
            "resolution": list(resolution),
            "camera_matrix": dataset.camera_matrix.astype(np.float64).tolist(),
            "dist_coeffs": dataset.dist_coeffs.astype(np.float64).ravel().tolist(),
            "rms": dataset.total_avg_err,
            "sample_count": dataset.sample_count,
        }
    }

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def load_calibration_from_toml(
    path: Path,
    dataset: CalibrationDataset,
) -> tuple[int, int] | None:
    """
    Load a saved calibration result into a dataset.

    Samples in the dataset are left alone.

    Args:
        path: Path to calibration.toml file
        dataset: Dataset to receive camera matrix, distortion and RMS

    Returns:
        The stored (width, height), or None if the file doesn't exist
    """
    if not path.exists():
        return None

    calib = rtoml.load(path)["calibration"]

    dataset.camera_matrix = np.array(calib["camera_matrix"], dtype=np.float64).reshape(3, 3)
    dataset.dist_coeffs = np.array(calib["dist_coeffs"], dtype=np.float64)
    dataset.total_avg_err = float(calib["rms"])

    return tuple(calib["resolution"])
