"""
Capture session driver.

Owns the CalibrationDataset and both processors, routes each frame to the
active one, and runs the solver when enough samples have been captured.
"""

from __future__ import annotations

from typing import Literal, Optional

import numpy as np

from . import logger as _logger
from .calibration.patterns import DetectorFn
from .calibration.solver import calibrate_dataset
from .processors import CaptureCallback, CaptureProcessor, PreviewProcessor
from .types import BoardConfig, CalibrationDataset, CaptureConfig

logger = _logger.get(__name__)

Mode = Literal["capture", "preview"]


class CalibrationSession:
    """
    One calibration session for a fixed board.

    Starts in capture mode. When the capture processor reports completion
    the dataset is calibrated and the session switches to preview.
    """

    def __init__(
        self,
        board: BoardConfig,
        capture_config: CaptureConfig | None = None,
        detector: Optional[DetectorFn] = None,
        on_capture: Optional[CaptureCallback] = None,
    ):
        self.board = board
        self.capture_config = capture_config or CaptureConfig()
        self.dataset = CalibrationDataset()

        self.capture = CaptureProcessor(
            self.dataset,
            board,
            self.capture_config,
            detector=detector,
            on_capture=on_capture,
        )
        self.preview = PreviewProcessor(self.dataset)
        self.mode: Mode = "capture"

    @property
    def active_processor(self) -> CaptureProcessor | PreviewProcessor:
        return self.capture if self.mode == "capture" else self.preview

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        annotated = self.active_processor.process_frame(frame)

        if self.mode == "capture" and self.capture.is_complete():
            self._finish_capture()

        return annotated

    def _finish_capture(self) -> None:
        logger.info(f"Capture complete with {self.dataset.sample_count} samples, calibrating")
        try:
            calibrate_dataset(self.dataset, self.board, self.capture_config.resolution)
        except ValueError as e:
            logger.warning(f"Calibration failed, continuing capture: {e}")
            self.capture.reset()
            return
        self.set_mode("preview")

    def set_mode(self, mode: Mode) -> None:
        if mode not in ("capture", "preview"):
            raise ValueError(f"Unknown mode: {mode}")
        if mode != self.mode:
            logger.info(f"Switching to {mode} mode")
        self.mode = mode
        if mode == "capture":
            self.capture.reset()

    def toggle_mode(self) -> Mode:
        self.set_mode("preview" if self.mode == "capture" else "capture")
        return self.mode

    def reset(self) -> None:
        """Discard all samples and calibration and return to capture mode."""
        self.dataset.clear_samples()
        self.dataset.clear_calibration()
        self.set_mode("capture")
        logger.info("Session reset")
