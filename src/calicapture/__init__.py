# calicapture - Interactive camera calibration capture

__version__ = "0.1.0"

# Core types
from calicapture.types import (
    PatternType,
    BoardConfig,
    Detection,
    CaptureConfig,
    CalibrationDataset,
)

# Detection, object points, stability
from calicapture.calibration import (
    detect_pattern,
    get_object_points,
    StabilityGate,
    calibrate_dataset,
)

# Frame processing
from calicapture.processors import (
    CaptureProcessor,
    PreviewProcessor,
)
from calicapture.session import CalibrationSession

# Configuration
from calicapture.config import (
    SessionConfig,
    load_session_config,
    save_session_config,
    save_calibration_to_toml,
    load_calibration_from_toml,
)

__all__ = [
    # Core types
    "PatternType",
    "BoardConfig",
    "Detection",
    "CaptureConfig",
    "CalibrationDataset",
    # Calibration
    "detect_pattern",
    "get_object_points",
    "StabilityGate",
    "calibrate_dataset",
    # Processing
    "CaptureProcessor",
    "PreviewProcessor",
    "CalibrationSession",
    # Configuration
    "SessionConfig",
    "load_session_config",
    "save_session_config",
    "save_calibration_to_toml",
    "load_calibration_from_toml",
]
