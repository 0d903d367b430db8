"""
Run OpenCV calibration over a collected dataset.

Thin wrapper: the estimation itself is cv2.calibrateCamera. Results are
written back into the dataset so the preview processor can use them.
"""

from __future__ import annotations

import cv2
import numpy as np

from .. import logger as _logger
from ..types import BoardConfig, CalibrationDataset, PatternType
from .patterns import create_charuco_board

logger = _logger.get(__name__)

MIN_CHARUCO_CORNERS = 4


def _charuco_views(
    dataset: CalibrationDataset,
    board: BoardConfig,
) -> tuple[list[np.ndarray], list[np.ndarray]]:
    """Resolve stored corner/id pairs into object/image point lists."""
    charuco_board = create_charuco_board(board)

    object_points = []
    image_points = []
    for corners, ids in zip(dataset.charuco_corners, dataset.charuco_ids):
        if len(ids) < MIN_CHARUCO_CORNERS:
            continue
        obj, img = charuco_board.matchImagePoints(
            corners.reshape(-1, 1, 2).astype(np.float32),
            ids.reshape(-1, 1).astype(np.int32),
        )
        if obj is None or len(obj) < MIN_CHARUCO_CORNERS:
            continue
        object_points.append(obj.reshape(-1, 3).astype(np.float32))
        image_points.append(img.reshape(-1, 2).astype(np.float32))

    return object_points, image_points


def calibrate_dataset(
    dataset: CalibrationDataset,
    board: BoardConfig,
    resolution: tuple[int, int],
) -> float:
    """
    Calibrate from the dataset's samples and store the result in it.

    Args:
        dataset: Dataset with collected samples (modified in place)
        board: Board the samples were collected with
        resolution: (width, height) of the frames

    Returns:
        RMS reprojection error in pixels

    Raises:
        ValueError: If the dataset holds no usable samples
    """
    if board.pattern is PatternType.CHARUCO:
        object_points, image_points = _charuco_views(dataset, board)
    else:
        object_points = [p.astype(np.float32) for p in dataset.object_points]
        image_points = [p.astype(np.float32) for p in dataset.image_points]

    if not object_points:
        raise ValueError(
            f"Insufficient samples for calibration: {dataset.sample_count} collected, "
            "none usable"
        )

    error, matrix, dist, _, _ = cv2.calibrateCamera(
        object_points,
        image_points,
        resolution,
        None,
        None,
    )

    dataset.camera_matrix = matrix
    dataset.dist_coeffs = dist.ravel()
    dataset.total_avg_err = float(error)

    logger.info(
        f"Calibrated from {len(object_points)} views: "
        f"fx={matrix[0, 0]:.1f} fy={matrix[1, 1]:.1f} RMS={error:.4f}"
    )
    return float(error)
