"""
Frame conversion utilities for PySide6 display.
"""

import numpy as np
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap


def bgr_to_pixmap(frame: np.ndarray) -> QPixmap:
    """
    Convert a BGR (or grayscale) frame to a QPixmap.

    Args:
        frame: (H, W, 3) BGR or (H, W) uint8 array

    Returns:
        QPixmap ready for QLabel.setPixmap()
    """
    if frame is None or frame.size == 0:
        return QPixmap()

    height, width = frame.shape[:2]

    if frame.ndim == 2:
        gray = np.ascontiguousarray(frame)
        image = QImage(gray.data, width, height, width, QImage.Format.Format_Grayscale8)
    else:
        rgb = np.ascontiguousarray(frame[:, :, ::-1])
        image = QImage(rgb.data, width, height, width * 3, QImage.Format.Format_RGB888)

    # QImage does not own the buffer; copy before the array goes away
    return QPixmap.fromImage(image.copy())


def fit_pixmap(pixmap: QPixmap, max_width: int, max_height: int) -> QPixmap:
    """Scale pixmap to fit within bounds, keeping aspect ratio."""
    if pixmap.isNull():
        return pixmap

    return pixmap.scaled(
        max_width,
        max_height,
        aspectMode=Qt.AspectRatioMode.KeepAspectRatio,
        transformMode=Qt.TransformationMode.SmoothTransformation,
    )
