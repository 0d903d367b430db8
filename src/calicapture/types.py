"""
Core data structures for calicapture.

Value types are frozen dataclasses. CalibrationDataset is the one mutable
container: it is shared between the capture processor (appends samples),
the solver (writes parameters) and the preview processor (reads them).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np


def _require_int(name: str, value) -> None:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _require_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")


def _require_int_pair(name: str, value) -> None:
    if not isinstance(value, tuple) or len(value) != 2:
        raise ValueError(f"{name} must be a pair of integers, got {value!r}")
    for item in value:
        _require_int(name, item)


# ============================================================================
# Pattern Geometry
# ============================================================================


class PatternType(Enum):
    """Calibration pattern families. Values match the TOML config names."""

    CHESSBOARD = "chessboard"
    CHARUCO = "charuco"
    ACIRCLES_GRID = "acircles"
    DOUBLE_ACIRCLES_GRID = "double_acircles"


@dataclass(frozen=True)  # No slots - need properties
class BoardConfig:
    """
    Geometry of the calibration target.

    columns x rows is the point grid handed to the detector (inner corners
    for a chessboard, circles per row and row count for circle grids).
    The charuco_* fields describe the marker board layout and are ignored
    by the other families.
    """

    pattern: PatternType
    columns: int
    rows: int
    square_size: float = 16.3  # Corner / circle spacing in physical units
    grid_distance: float = 295.0  # Gap between the two double-grid lattices
    charuco_squares: tuple[int, int] = (6, 8)  # (squares_x, squares_y)
    charuco_square_length: float = 200.0
    charuco_marker_length: float = 100.0
    dictionary: str = "DICT_4X4_50"
    legacy_pattern: bool = False

    def __post_init__(self):
        if not isinstance(self.pattern, PatternType):
            raise ValueError(f"Unknown pattern type: {self.pattern!r}")
        _require_int("columns", self.columns)
        _require_int("rows", self.rows)
        for name in (
            "square_size",
            "grid_distance",
            "charuco_square_length",
            "charuco_marker_length",
        ):
            _require_number(name, getattr(self, name))
        _require_int_pair("charuco_squares", self.charuco_squares)
        if not isinstance(self.dictionary, str):
            raise ValueError(f"dictionary must be a name, got {self.dictionary!r}")
        if not isinstance(self.legacy_pattern, bool):
            raise ValueError(f"legacy_pattern must be true or false, got {self.legacy_pattern!r}")

        if self.columns < 1 or self.rows < 1:
            raise ValueError(
                f"Board grid must be at least 1x1, got {self.columns}x{self.rows}"
            )
        if self.square_size <= 0:
            raise ValueError(f"square_size must be positive, got {self.square_size}")
        if self.pattern is PatternType.CHARUCO:
            squares_x, squares_y = self.charuco_squares
            if squares_x < 2 or squares_y < 2:
                raise ValueError(
                    f"ChArUco board needs at least 2x2 squares, got {squares_x}x{squares_y}"
                )
            if not 0 < self.charuco_marker_length < self.charuco_square_length:
                raise ValueError("charuco_marker_length must be within (0, charuco_square_length)")

    @property
    def pattern_size(self) -> tuple[int, int]:
        """OpenCV pattern size (points per row, rows)."""
        return (self.columns, self.rows)


# ============================================================================
# Detection
# ============================================================================


@dataclass(frozen=True, slots=True)
class Detection:
    """
    A located pattern in one frame.

    image_points are ordered the way the detector orders them, which is
    stable for a given geometry. charuco_ids (parallel to image_points) and
    the marker fields are only set for ChArUco boards.
    An absent pattern is represented by None, not by an empty Detection.
    """

    image_points: np.ndarray  # (n, 2) float32
    anchor: tuple[float, float]  # Representative point used for stability
    charuco_ids: np.ndarray | None = None  # (n,) int32
    marker_corners: np.ndarray | None = None  # (m, 4, 2) float32, ChArUco markers
    marker_ids: np.ndarray | None = None  # (m,) int32


# ============================================================================
# Capture Policy
# ============================================================================


@dataclass(frozen=True)  # No slots - need properties
class CaptureConfig:
    """
    Capture policy for one session.
    """

    resolution: tuple[int, int] = (1280, 960)  # (width, height)
    delay_between_captures: int = 30  # Frames the pattern must be held
    needed_frames: int = 1  # Captures required before the session is done
    capture_pause_ms: int = 300  # Confirmation display time after a capture

    def __post_init__(self):
        _require_int_pair("resolution", self.resolution)
        _require_int("delay_between_captures", self.delay_between_captures)
        _require_int("needed_frames", self.needed_frames)
        _require_int("capture_pause_ms", self.capture_pause_ms)

        width, height = self.resolution
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid resolution {self.resolution}")
        if self.delay_between_captures < 1:
            raise ValueError("delay_between_captures must be at least 1")
        if self.needed_frames < 1:
            raise ValueError("needed_frames must be at least 1")
        if self.capture_pause_ms < 0:
            raise ValueError("capture_pause_ms must not be negative")

    @property
    def max_template_offset(self) -> float:
        """Allowed anchor drift over the hold window (5% of the diagonal)."""
        width, height = self.resolution
        return math.sqrt(width * width + height * height) / 20.0


# ============================================================================
# Calibration Dataset
# ============================================================================


def _empty_matrix() -> np.ndarray:
    return np.empty((0, 0), dtype=np.float64)


@dataclass
class CalibrationDataset:
    """
    Samples collected during a session plus the solver's results.

    Geometric families append to image_points/object_points, ChArUco boards
    to charuco_corners/charuco_ids. The pattern is fixed per session so the
    two never mix. camera_matrix and dist_coeffs stay zero-sized until the
    solver writes them.

    Created by the session driver; outlives both processors.
    """

    image_points: list[np.ndarray] = field(default_factory=list)
    object_points: list[np.ndarray] = field(default_factory=list)
    charuco_corners: list[np.ndarray] = field(default_factory=list)
    charuco_ids: list[np.ndarray] = field(default_factory=list)
    camera_matrix: np.ndarray = field(default_factory=_empty_matrix)
    dist_coeffs: np.ndarray = field(default_factory=_empty_matrix)
    total_avg_err: float = 0.0

    @property
    def is_calibrated(self) -> bool:
        return self.camera_matrix.size > 0 and self.dist_coeffs.size > 0

    @property
    def sample_count(self) -> int:
        return len(self.image_points) + len(self.charuco_corners)

    def clear_samples(self) -> None:
        """Drop collected samples. Calibration results are kept."""
        self.image_points.clear()
        self.object_points.clear()
        self.charuco_corners.clear()
        self.charuco_ids.clear()

    def clear_calibration(self) -> None:
        self.camera_matrix = _empty_matrix()
        self.dist_coeffs = _empty_matrix()
        self.total_avg_err = 0.0
