"""
Calibration module for calicapture.

Detectors and object-point generators are pure functions keyed by pattern
type. StabilityGate is the only stateful piece.
"""

from .patterns import (
    ARUCO_DICTIONARIES,
    DETECTORS,
    create_charuco_board,
    detect_pattern,
    detect_chessboard,
    detect_charuco,
    detect_acircles,
    detect_double_acircles,
    draw_detection,
)

from .object_points import (
    chessboard_object_points,
    acircles_object_points,
    double_acircles_object_points,
    get_object_points,
)

from .stability import StabilityGate

from .solver import calibrate_dataset

__all__ = [
    # Detection
    "ARUCO_DICTIONARIES",
    "DETECTORS",
    "create_charuco_board",
    "detect_pattern",
    "detect_chessboard",
    "detect_charuco",
    "detect_acircles",
    "detect_double_acircles",
    "draw_detection",
    # Object points
    "chessboard_object_points",
    "acircles_object_points",
    "double_acircles_object_points",
    "get_object_points",
    # Stability
    "StabilityGate",
    # Solver
    "calibrate_dataset",
]
