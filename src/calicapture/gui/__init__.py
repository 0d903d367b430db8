"""
calicapture GUI.

Single window showing the live camera with capture / preview overlays.
"""

from .main import CaptureWindow

__all__ = ["CaptureWindow"]
