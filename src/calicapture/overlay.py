"""
Text and marker overlays drawn on feedback frames.
"""

from __future__ import annotations

import cv2
import numpy as np

FONT = cv2.FONT_HERSHEY_PLAIN
TEXT_SCALE = 4
TEXT_THICKNESS = 2

GREEN = (0, 255, 0)
RED = (0, 0, 255)

CAPTURED_TEXT = "Frame captured"
UNDISTORTED_TEXT = "Undistorted view"


def draw_banner(canvas: np.ndarray, text: str, color: tuple[int, int, int] = GREEN) -> None:
    """Draw text near the bottom-right corner of canvas, in place."""
    (text_width, _), baseline = cv2.getTextSize(text, FONT, TEXT_SCALE, TEXT_THICKNESS)
    height, width = canvas.shape[:2]
    origin = (
        max(0, width - 2 * text_width - 10),
        max(0, height - 2 * baseline - 10),
    )
    cv2.putText(canvas, text, origin, FONT, TEXT_SCALE, color, TEXT_THICKNESS)


def format_status(camera_matrix: np.ndarray, total_avg_err: float) -> str:
    """Focal lengths and fit error, e.g. 'Fx = 812 Fy = 809 RMS = 0.412345'."""
    fx = int(camera_matrix[0, 0])
    fy = int(camera_matrix[1, 1])
    return "Fx = %d Fy = %d RMS = %f" % (fx, fy, total_avg_err)


def draw_status(canvas: np.ndarray, text: str, color: tuple[int, int, int] = RED) -> None:
    """Draw a status line in the top-left corner of canvas, in place."""
    (_, text_height), _ = cv2.getTextSize(text, FONT, TEXT_SCALE - 1, TEXT_THICKNESS)
    cv2.putText(canvas, text, (20, 2 * text_height), FONT, TEXT_SCALE, color, TEXT_THICKNESS)


def draw_uncalibrated_marker(canvas: np.ndarray) -> None:
    """Fixed indicator shown while no calibration is available."""
    cv2.circle(canvas, (100, 100), 10, GREEN, 10)
