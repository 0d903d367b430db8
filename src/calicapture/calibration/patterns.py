"""
Pattern detection, one strategy per board geometry.

Each detector takes a BGR frame and a BoardConfig and returns a Detection,
or None when the pattern is not in view. None is the normal outcome for
most frames and is never an error. Detectors do not draw on or modify the
frame; use draw_detection() on a copy for feedback.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Optional

import cv2
import numpy as np

from ..types import BoardConfig, Detection, PatternType


# ============================================================================
# ArUco Dictionary Reference
# ============================================================================

ARUCO_DICTIONARIES = {
    "DICT_4X4_50": cv2.aruco.DICT_4X4_50,
    "DICT_4X4_100": cv2.aruco.DICT_4X4_100,
    "DICT_4X4_250": cv2.aruco.DICT_4X4_250,
    "DICT_4X4_1000": cv2.aruco.DICT_4X4_1000,
    "DICT_5X5_50": cv2.aruco.DICT_5X5_50,
    "DICT_5X5_100": cv2.aruco.DICT_5X5_100,
    "DICT_5X5_250": cv2.aruco.DICT_5X5_250,
    "DICT_5X5_1000": cv2.aruco.DICT_5X5_1000,
    "DICT_6X6_50": cv2.aruco.DICT_6X6_50,
    "DICT_6X6_100": cv2.aruco.DICT_6X6_100,
    "DICT_6X6_250": cv2.aruco.DICT_6X6_250,
    "DICT_6X6_1000": cv2.aruco.DICT_6X6_1000,
    "DICT_7X7_50": cv2.aruco.DICT_7X7_50,
    "DICT_7X7_100": cv2.aruco.DICT_7X7_100,
    "DICT_7X7_250": cv2.aruco.DICT_7X7_250,
    "DICT_7X7_1000": cv2.aruco.DICT_7X7_1000,
    "DICT_ARUCO_ORIGINAL": cv2.aruco.DICT_ARUCO_ORIGINAL,
}

CHESSBOARD_FLAGS = (
    cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE | cv2.CALIB_CB_FAST_CHECK
)
SUBPIX_WINDOW = (11, 11)
SUBPIX_CRITERIA = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, 30, 0.1)

_FLOAT_MAX = float(np.finfo(np.float32).max)


# ============================================================================
# Shared Detector Objects
# ============================================================================


@lru_cache(maxsize=8)
def create_charuco_board(board: BoardConfig) -> cv2.aruco.CharucoBoard:
    """
    Create the OpenCV CharucoBoard described by a BoardConfig.

    Cached per config, so the detector and the solver share one instance.
    """
    if board.dictionary not in ARUCO_DICTIONARIES:
        raise ValueError(f"Unknown ArUco dictionary: {board.dictionary}")
    dictionary = cv2.aruco.getPredefinedDictionary(ARUCO_DICTIONARIES[board.dictionary])

    charuco_board = cv2.aruco.CharucoBoard(
        size=board.charuco_squares,
        squareLength=board.charuco_square_length,
        markerLength=board.charuco_marker_length,
        dictionary=dictionary,
    )
    charuco_board.setLegacyPattern(board.legacy_pattern)

    return charuco_board


@lru_cache(maxsize=8)
def _create_charuco_detector(board: BoardConfig) -> cv2.aruco.CharucoDetector:
    charuco_params = cv2.aruco.CharucoParameters()
    charuco_params.tryRefineMarkers = True  # Recover rejected markers from the layout
    return cv2.aruco.CharucoDetector(
        create_charuco_board(board),
        charuco_params,
        cv2.aruco.DetectorParameters(),
        cv2.aruco.RefineParameters(),
    )


def double_grid_blob_params() -> cv2.SimpleBlobDetector_Params:
    """
    Blob parameters for the double circle grid.

    Tuned for small dark blobs; circularity is not filtered because the
    circles are seen at steep angles.
    """
    params = cv2.SimpleBlobDetector_Params()

    params.thresholdStep = 40
    params.minThreshold = 20
    params.maxThreshold = 500
    params.minRepeatability = 2
    params.minDistBetweenBlobs = 5

    params.filterByColor = True
    params.blobColor = 0

    params.filterByArea = True
    params.minArea = 5
    params.maxArea = 5000

    params.filterByCircularity = False
    params.minCircularity = 0.8
    params.maxCircularity = _FLOAT_MAX

    params.filterByInertia = True
    params.minInertiaRatio = 0.1
    params.maxInertiaRatio = _FLOAT_MAX

    params.filterByConvexity = True
    params.minConvexity = 0.8
    params.maxConvexity = _FLOAT_MAX

    return params


@lru_cache(maxsize=1)
def _double_grid_blob_detector() -> cv2.SimpleBlobDetector:
    return cv2.SimpleBlobDetector_create(double_grid_blob_params())


def _to_gray(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return frame
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def _first_point(points: np.ndarray) -> tuple[float, float]:
    return (float(points[0, 0]), float(points[0, 1]))


# ============================================================================
# Detectors
# ============================================================================


def detect_chessboard(frame: np.ndarray, board: BoardConfig) -> Detection | None:
    """
    Find chessboard inner corners and refine them to sub-pixel accuracy.

    Anchor is the first refined corner.
    """
    found, corners = cv2.findChessboardCorners(
        frame, board.pattern_size, flags=CHESSBOARD_FLAGS
    )
    if not found or corners is None:
        return None

    corners = cv2.cornerSubPix(
        _to_gray(frame), corners, SUBPIX_WINDOW, (-1, -1), SUBPIX_CRITERIA
    )
    points = corners.reshape(-1, 2).astype(np.float32)

    return Detection(image_points=points, anchor=_first_point(points))


def detect_charuco(frame: np.ndarray, board: BoardConfig) -> Detection | None:
    """
    Detect ArUco markers, recover rejected candidates against the board
    layout, then interpolate the chessboard corners between markers.

    Anchor is the centroid of the interpolated corners. Fails unless at
    least one corner was interpolated.
    """
    detector = _create_charuco_detector(board)
    gray = _to_gray(frame)

    charuco_corners, charuco_ids, marker_corners, marker_ids = detector.detectBoard(gray)
    if marker_ids is None or len(marker_ids) == 0:
        return None
    if charuco_corners is None or charuco_ids is None or len(charuco_ids) == 0:
        return None

    points = charuco_corners.reshape(-1, 2).astype(np.float32)
    ids = charuco_ids.reshape(-1).astype(np.int32)
    center = points.mean(axis=0)

    return Detection(
        image_points=points,
        anchor=(float(center[0]), float(center[1])),
        charuco_ids=ids,
        marker_corners=np.asarray(marker_corners, dtype=np.float32).reshape(-1, 4, 2),
        marker_ids=marker_ids.reshape(-1).astype(np.int32),
    )


def detect_acircles(frame: np.ndarray, board: BoardConfig) -> Detection | None:
    """
    Find an asymmetric circle grid with the default blob detector.

    Anchor is the first detected center.
    """
    found, centers = cv2.findCirclesGrid(
        frame, board.pattern_size, flags=cv2.CALIB_CB_ASYMMETRIC_GRID
    )
    if not found or centers is None:
        return None

    points = centers.reshape(-1, 2).astype(np.float32)
    return Detection(image_points=points, anchor=_first_point(points))


def detect_double_acircles(frame: np.ndarray, board: BoardConfig) -> Detection | None:
    """
    Find both halves of a double asymmetric circle grid.

    The white grid is searched on the frame as-is, the black grid on its
    inverse. Both must be found; a half result is discarded. Points are
    white then black, anchor is the first white point.
    """
    blob_detector = _double_grid_blob_detector()

    white_found, white_centers = cv2.findCirclesGrid(
        frame,
        board.pattern_size,
        flags=cv2.CALIB_CB_ASYMMETRIC_GRID,
        blobDetector=blob_detector,
    )
    if not white_found or white_centers is None:
        return None

    inverted = cv2.bitwise_not(frame)
    black_found, black_centers = cv2.findCirclesGrid(
        inverted,
        board.pattern_size,
        flags=cv2.CALIB_CB_ASYMMETRIC_GRID,
        blobDetector=blob_detector,
    )
    if not black_found or black_centers is None:
        return None

    white = white_centers.reshape(-1, 2).astype(np.float32)
    black = black_centers.reshape(-1, 2).astype(np.float32)
    points = np.vstack([white, black])

    return Detection(image_points=points, anchor=_first_point(white))


DetectorFn = Callable[[np.ndarray, BoardConfig], Optional[Detection]]

DETECTORS: dict[PatternType, DetectorFn] = {
    PatternType.CHESSBOARD: detect_chessboard,
    PatternType.CHARUCO: detect_charuco,
    PatternType.ACIRCLES_GRID: detect_acircles,
    PatternType.DOUBLE_ACIRCLES_GRID: detect_double_acircles,
}


def detect_pattern(frame: np.ndarray, board: BoardConfig) -> Detection | None:
    """Run the detector matching the board's pattern type."""
    return DETECTORS[board.pattern](frame, board)


# ============================================================================
# Feedback Drawing
# ============================================================================


def draw_detection(canvas: np.ndarray, detection: Detection, board: BoardConfig) -> None:
    """
    Draw detected features onto canvas in place.

    Pass a copy of the camera frame, never the original.
    """
    points = detection.image_points.reshape(-1, 1, 2)

    if board.pattern is PatternType.CHARUCO:
        if detection.marker_corners is not None and detection.marker_ids is not None:
            cv2.aruco.drawDetectedMarkers(
                canvas,
                [c.reshape(1, 4, 2) for c in detection.marker_corners],
                detection.marker_ids.reshape(-1, 1),
            )
        cv2.aruco.drawDetectedCornersCharuco(
            canvas, points, detection.charuco_ids.reshape(-1, 1)
        )
    elif board.pattern is PatternType.DOUBLE_ACIRCLES_GRID:
        half = board.columns * board.rows
        cv2.drawChessboardCorners(canvas, board.pattern_size, points[:half], True)
        cv2.drawChessboardCorners(canvas, board.pattern_size, points[half:], True)
    else:
        cv2.drawChessboardCorners(canvas, board.pattern_size, points, True)
