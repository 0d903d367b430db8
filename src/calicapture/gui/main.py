"""
Main window for the calicapture live calibration tool.
"""

from __future__ import annotations

import sys
from pathlib import Path

import cv2
import numpy as np
from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSizePolicy,
    QStatusBar,
)

from .. import logger as _logger
from ..config import (
    SessionConfig,
    create_default_session_config,
    load_calibration_from_toml,
    save_calibration_to_toml,
)
from ..session import CalibrationSession
from .frame_utils import bgr_to_pixmap, fit_pixmap

logger = _logger.get(__name__)

KEY_HELP = "R: reset   Space: capture/preview   S: save calibration   Esc: quit"


class CaptureWindow(QMainWindow):
    """
    Live camera view driving a CalibrationSession.

    Frames are pulled from the camera on a timer and shown after
    processing. After each capture the timer is paused for the configured
    time so the confirmation stays on screen.
    """

    def __init__(
        self,
        config: SessionConfig,
        output_path: Path | None = None,
        start_in_preview: bool = False,
    ):
        super().__init__()

        self.config = config
        self.output_path = output_path or Path("calibration.toml")
        self.session = CalibrationSession(
            config.board,
            config.capture,
            on_capture=self._hold_confirmation,
        )
        if start_in_preview:
            self._load_calibration()

        self.setWindowTitle("calicapture - Camera Calibration")
        self.setMinimumSize(800, 600)

        self._init_ui()

        self.cap = cv2.VideoCapture(config.camera)
        width, height = config.capture.resolution
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self.frame_timer = QTimer(self)
        self.frame_timer.timeout.connect(self._next_frame)

    def _init_ui(self):
        self.frame_label = QLabel()
        self.frame_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.frame_label.setSizePolicy(
            QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding
        )
        self.frame_label.setStyleSheet("background-color: #1a1a1a;")
        self.setCentralWidget(self.frame_label)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage(KEY_HELP)

    def start(self) -> bool:
        if not self.cap.isOpened():
            QMessageBox.warning(self, "Error", f"Could not open camera {self.config.camera}")
            return False
        self.frame_timer.start(0)
        return True

    def _next_frame(self):
        ok, frame = self.cap.read()
        if not ok:
            logger.warning("Camera read failed")
            return

        annotated = self.session.process_frame(frame)
        self._show(annotated)
        self._update_status()

    def _show(self, frame: np.ndarray):
        pixmap = bgr_to_pixmap(frame)
        self.frame_label.setPixmap(
            fit_pixmap(pixmap, self.frame_label.width(), self.frame_label.height())
        )

    def _update_status(self):
        capture = self.session.capture
        if self.session.mode == "capture":
            message = (
                f"Capture: {capture.captured_frames}/{self.config.capture.needed_frames}"
                f"   {KEY_HELP}"
            )
        else:
            message = f"Preview   {KEY_HELP}"
        self.status_bar.showMessage(message)

    def _hold_confirmation(self, frame: np.ndarray, pause_ms: int):
        """Show the captured frame and stop pulling frames for pause_ms."""
        self._show(frame)
        self.frame_timer.stop()
        QTimer.singleShot(pause_ms, lambda: self.frame_timer.start(0))

    def _load_calibration(self):
        resolution = load_calibration_from_toml(self.output_path, self.session.dataset)
        if resolution is None:
            logger.warning(f"No calibration at {self.output_path}, starting in capture mode")
            return
        if resolution != self.config.capture.resolution:
            logger.warning(
                f"Calibration was made at {resolution}, camera configured for "
                f"{self.config.capture.resolution}"
            )
        self.session.set_mode("preview")

    def _save_calibration(self):
        dataset = self.session.dataset
        if not dataset.is_calibrated:
            self.status_bar.showMessage("Nothing to save: not calibrated yet", 3000)
            return
        save_calibration_to_toml(dataset, self.output_path, self.config.capture.resolution)
        logger.info(f"Saved calibration to {self.output_path}")
        self.status_bar.showMessage(f"Saved {self.output_path}", 3000)

    def keyPressEvent(self, event):
        key = event.key()
        if key == Qt.Key.Key_Escape:
            self.close()
        elif key == Qt.Key.Key_R:
            self.session.reset()
        elif key == Qt.Key.Key_Space:
            self.session.toggle_mode()
        elif key == Qt.Key.Key_S:
            self._save_calibration()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        """Stop the timer and release the camera."""
        self.frame_timer.stop()
        self.cap.release()
        event.accept()


def main(
    config: SessionConfig | None = None,
    output_path: Path | None = None,
    start_in_preview: bool = False,
) -> int:
    """Entry point for the GUI application."""
    app = QApplication(sys.argv)
    app.setApplicationName("calicapture")

    window = CaptureWindow(
        config or create_default_session_config(),
        output_path,
        start_in_preview=start_in_preview,
    )
    window.show()
    if not window.start():
        return 1

    return app.exec()
