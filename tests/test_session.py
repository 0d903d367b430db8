"""
Tests for calicapture.session.
"""

import numpy as np
import pytest

from calicapture import session as session_module
from calicapture.session import CalibrationSession
from calicapture.types import CaptureConfig


@pytest.fixture
def frame():
    return np.zeros((120, 160, 3), dtype=np.uint8)


@pytest.fixture
def fake_solver(monkeypatch, sample_intrinsics_matrix, sample_distortion):
    """Replace the solver with one that writes fixed results."""
    calls = []

    def solve(dataset, board, resolution):
        calls.append((dataset.sample_count, resolution))
        dataset.camera_matrix = sample_intrinsics_matrix
        dataset.dist_coeffs = sample_distortion
        dataset.total_avg_err = 0.3
        return 0.3

    monkeypatch.setattr(session_module, "calibrate_dataset", solve)
    return calls


@pytest.fixture
def failing_solver(monkeypatch):
    def solve(dataset, board, resolution):
        raise ValueError("Insufficient samples for calibration")

    monkeypatch.setattr(session_module, "calibrate_dataset", solve)


class TestCalibrationSession:
    def test_starts_in_capture_mode(self, chessboard_config):
        session = CalibrationSession(chessboard_config)
        assert session.mode == "capture"
        assert session.active_processor is session.capture
        assert session.dataset.sample_count == 0
        assert session.capture.dataset is session.dataset
        assert session.preview.dataset is session.dataset

    def test_calibrates_and_switches_to_preview(
        self, chessboard_config, scripted_detector, fake_solver, frame
    ):
        session = CalibrationSession(
            chessboard_config,
            CaptureConfig(needed_frames=2),
            detector=scripted_detector([(20.0, 20.0)] * 60),
        )

        for _ in range(30):
            session.process_frame(frame)
        assert session.mode == "capture"
        assert fake_solver == []

        for _ in range(30):
            session.process_frame(frame)
        assert session.mode == "preview"
        assert fake_solver == [(2, (1280, 960))]
        assert session.dataset.is_calibrated

    def test_preview_frames_use_calibration(
        self, chessboard_config, scripted_detector, fake_solver, blank_frame
    ):
        session = CalibrationSession(
            chessboard_config,
            detector=scripted_detector([(20.0, 20.0)] * 30),
        )
        for _ in range(30):
            session.process_frame(blank_frame)
        assert session.mode == "preview"

        out = session.process_frame(blank_frame)
        assert out.shape == blank_frame.shape

    def test_solver_failure_keeps_capturing(
        self, chessboard_config, scripted_detector, failing_solver, frame
    ):
        session = CalibrationSession(
            chessboard_config,
            detector=scripted_detector([(20.0, 20.0)] * 30),
        )
        for _ in range(30):
            session.process_frame(frame)

        assert session.mode == "capture"
        assert session.capture.captured_frames == 0
        assert session.dataset.sample_count == 1

    def test_toggle_mode(self, chessboard_config):
        session = CalibrationSession(chessboard_config)
        assert session.toggle_mode() == "preview"
        assert session.active_processor is session.preview
        assert session.toggle_mode() == "capture"

    def test_unknown_mode(self, chessboard_config):
        session = CalibrationSession(chessboard_config)
        with pytest.raises(ValueError):
            session.set_mode("record")

    def test_reset_clears_everything(
        self, chessboard_config, scripted_detector, fake_solver, frame
    ):
        session = CalibrationSession(
            chessboard_config,
            detector=scripted_detector([(20.0, 20.0)] * 30),
        )
        for _ in range(30):
            session.process_frame(frame)
        assert session.mode == "preview"

        session.reset()

        assert session.mode == "capture"
        assert session.dataset.sample_count == 0
        assert not session.dataset.is_calibrated
        assert session.capture.captured_frames == 0

    def test_reset_resets_capture_once(self, chessboard_config, monkeypatch):
        session = CalibrationSession(chessboard_config)
        session.set_mode("preview")
        calls = []
        monkeypatch.setattr(session.capture, "reset", lambda: calls.append(1))

        session.reset()

        assert session.mode == "capture"
        assert calls == [1]
