"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def blank_frame():
    """Plain gray 1280x960 BGR frame with no pattern in it."""
    return np.full((960, 1280, 3), 128, dtype=np.uint8)


@pytest.fixture
def chessboard_config():
    """9x6 inner-corner chessboard."""
    from calicapture.types import BoardConfig, PatternType
    return BoardConfig(pattern=PatternType.CHESSBOARD, columns=9, rows=6)


@pytest.fixture
def charuco_config():
    """Default 6x8 square ChArUco board."""
    from calicapture.types import BoardConfig, PatternType
    return BoardConfig(pattern=PatternType.CHARUCO, columns=5, rows=7)


@pytest.fixture
def acircles_config():
    """4 circles per row, 11 rows."""
    from calicapture.types import BoardConfig, PatternType
    return BoardConfig(pattern=PatternType.ACIRCLES_GRID, columns=4, rows=11)


@pytest.fixture
def double_acircles_config():
    from calicapture.types import BoardConfig, PatternType
    return BoardConfig(pattern=PatternType.DOUBLE_ACIRCLES_GRID, columns=4, rows=11)


@pytest.fixture
def chessboard_image():
    """
    Synthetic BGR chessboard with 10x7 squares (9x6 inner corners),
    60px squares on a white margin.
    """
    square = 60
    margin = 80
    squares_x, squares_y = 10, 7
    height = squares_y * square + 2 * margin
    width = squares_x * square + 2 * margin

    img = np.full((height, width), 255, dtype=np.uint8)
    for row in range(squares_y):
        for col in range(squares_x):
            if (row + col) % 2 == 0:
                y0 = margin + row * square
                x0 = margin + col * square
                img[y0:y0 + square, x0:x0 + square] = 0

    return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)


@pytest.fixture
def sample_intrinsics_matrix():
    """Typical camera intrinsics matrix for a 1280x960 camera."""
    return np.array([
        [900.0, 0.0, 640.0],
        [0.0, 900.0, 480.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def sample_distortion():
    """Typical distortion coefficients (k1, k2, p1, p2, k3)."""
    return np.array([0.1, -0.25, 0.001, -0.001, 0.1], dtype=np.float64)


@pytest.fixture
def calibrated_dataset(sample_intrinsics_matrix, sample_distortion):
    """Dataset with solver results already written."""
    from calicapture.types import CalibrationDataset
    dataset = CalibrationDataset()
    dataset.camera_matrix = sample_intrinsics_matrix
    dataset.dist_coeffs = sample_distortion
    dataset.total_avg_err = 0.42
    return dataset


class ScriptedDetector:
    """
    Detector stand-in that replays a list of anchors (None = not found).

    Returns a Detection whose points are a small grid around the anchor,
    with charuco ids when the board is a ChArUco board.
    """

    def __init__(self, anchors):
        self.anchors = list(anchors)
        self.calls = 0

    def extend(self, anchors):
        self.anchors.extend(anchors)

    def __call__(self, frame, board):
        from calicapture.types import Detection, PatternType

        anchor = self.anchors[self.calls]
        self.calls += 1
        if anchor is None:
            return None

        count = board.columns * board.rows
        if board.pattern is PatternType.DOUBLE_ACIRCLES_GRID:
            count *= 2
        x, y = anchor
        points = np.array(
            [[x + 2.0 * (k % board.columns), y + 2.0 * (k // board.columns)] for k in range(count)],
            dtype=np.float32,
        )
        ids = None
        if board.pattern is PatternType.CHARUCO:
            ids = np.arange(count, dtype=np.int32)
        return Detection(image_points=points, anchor=(x, y), charuco_ids=ids)


@pytest.fixture
def scripted_detector():
    """Factory for ScriptedDetector."""
    return ScriptedDetector
