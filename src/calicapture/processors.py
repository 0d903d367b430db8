"""
Frame processors: capture mode and undistorted preview mode.

A processor takes one BGR frame at a time and returns the annotated frame
to show. Only one processor is active at a time; both share the session's
CalibrationDataset.
"""

from __future__ import annotations

from typing import Callable, Optional

import cv2
import numpy as np

from . import logger as _logger
from .calibration.object_points import get_object_points
from .calibration.patterns import DETECTORS, DetectorFn, draw_detection
from .calibration.stability import StabilityGate
from .overlay import (
    CAPTURED_TEXT,
    UNDISTORTED_TEXT,
    draw_banner,
    draw_status,
    draw_uncalibrated_marker,
    format_status,
)
from .types import BoardConfig, CalibrationDataset, CaptureConfig, Detection, PatternType

logger = _logger.get(__name__)

# Called with the annotated frame and the pause in milliseconds after each
# accepted capture, so the presentation layer can hold the confirmation.
CaptureCallback = Callable[[np.ndarray, int], None]


class CaptureProcessor:
    """
    Collects calibration samples from a live stream.

    Each frame is run through the board's detector and the stability gate.
    When the gate fires the detection is stored in the dataset, the frame
    is labelled "Frame captured" and the gate starts over.
    """

    def __init__(
        self,
        dataset: CalibrationDataset,
        board: BoardConfig,
        config: CaptureConfig | None = None,
        detector: Optional[DetectorFn] = None,
        on_capture: Optional[CaptureCallback] = None,
    ):
        self.dataset = dataset
        self.board = board
        self.config = config or CaptureConfig()
        self.detector = detector or DETECTORS[board.pattern]
        self.on_capture = on_capture

        self.captured_frames = 0
        self.gate = StabilityGate(
            capacity=self.config.delay_between_captures,
            max_offset=self.config.max_template_offset,
        )

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        annotated = frame.copy()

        detection = self.detector(frame, self.board)
        if detection is not None:
            draw_detection(annotated, detection, self.board)

        anchor = detection.anchor if detection is not None else None
        if not self.gate.observe(anchor):
            return annotated

        self._save_sample(detection)
        self.captured_frames += 1
        self.gate.reset()
        logger.info(
            f"Frame captured ({self.captured_frames}/{self.config.needed_frames}, "
            f"{self.dataset.sample_count} samples in dataset)"
        )

        draw_banner(annotated, CAPTURED_TEXT)
        if self.on_capture is not None:
            self.on_capture(annotated, self.config.capture_pause_ms)

        return annotated

    def _save_sample(self, detection: Detection) -> None:
        if self.board.pattern is PatternType.CHARUCO:
            self.dataset.charuco_corners.append(detection.image_points.copy())
            self.dataset.charuco_ids.append(detection.charuco_ids.copy())
            return

        self.dataset.image_points.append(detection.image_points.copy())
        self.dataset.object_points.append(get_object_points(self.board))

    def is_complete(self) -> bool:
        return self.captured_frames >= self.config.needed_frames

    def reset(self) -> None:
        """Start counting again. Samples already in the dataset are kept."""
        self.captured_frames = 0
        self.gate.reset()


class PreviewProcessor:
    """
    Live undistorted view using the dataset's calibration.

    Before a calibration exists frames pass through with a small marker.
    Never completes.
    """

    def __init__(self, dataset: CalibrationDataset):
        self.dataset = dataset

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        if not self.dataset.is_calibrated:
            annotated = frame.copy()
            draw_uncalibrated_marker(annotated)
            return annotated

        height, width = frame.shape[:2]
        camera_matrix = self.dataset.camera_matrix
        dist_coeffs = self.dataset.dist_coeffs

        new_matrix, _ = cv2.getOptimalNewCameraMatrix(
            camera_matrix, dist_coeffs, (width, height), 1.0, (width, height)
        )
        undistorted = cv2.undistort(frame, camera_matrix, dist_coeffs, None, new_matrix)

        draw_banner(undistorted, UNDISTORTED_TEXT)
        draw_status(undistorted, format_status(camera_matrix, self.dataset.total_avg_err))

        return undistorted

    def is_complete(self) -> bool:
        return False

    def reset(self) -> None:
        pass
