"""
Unit tests for frame-to-sample reduction and the camera wrapper.
"""

from __future__ import annotations

import numpy as np
import pytest

from ppg_monitor.camera import CameraSource, centre_roi, sample_from_frame


class TestSampleFromFrame:

    def test_bgr_channel_order(self):
        frame = np.zeros((6, 8, 3), dtype=np.uint8)
        frame[:, :, 0] = 10   # blue
        frame[:, :, 1] = 20   # green
        frame[:, :, 2] = 30   # red
        s = sample_from_frame(frame, captured_at=1.5)
        assert s.blue == pytest.approx(10.0)
        assert s.green == pytest.approx(20.0)
        assert s.red == pytest.approx(30.0)
        assert s.captured_at == 1.5

    def test_centre_roi_only(self):
        frame = np.zeros((8, 8, 3), dtype=np.uint8)
        frame[2:6, 2:6, 1] = 200
        assert sample_from_frame(frame, 0.0).green == pytest.approx(50.0)
        assert sample_from_frame(frame, 0.0, roi_fraction=0.5).green == pytest.approx(200.0)

    def test_four_channel_frame(self):
        frame = np.full((4, 4, 4), 90, dtype=np.uint8)
        assert sample_from_frame(frame, 0.0).red == pytest.approx(90.0)

    def test_mirrored_frame_gives_same_sample(self):
        rng = np.random.default_rng(5)
        frame = rng.integers(0, 256, (9, 12, 3), dtype=np.uint8)
        a = sample_from_frame(frame, 0.0, roi_fraction=0.5)
        b = sample_from_frame(frame[:, ::-1], 0.0, roi_fraction=0.5)
        assert (a.red, a.green, a.blue) == pytest.approx((b.red, b.green, b.blue))

    def test_rejects_grayscale(self):
        with pytest.raises(ValueError):
            sample_from_frame(np.zeros((4, 4), dtype=np.uint8), 0.0)


class TestCentreRoi:

    def test_half(self):
        assert centre_roi((8, 8, 3), 0.5) == (2, 2, 4, 4)

    def test_full_frame(self):
        assert centre_roi((480, 640, 3), 1.0) == (0, 0, 640, 480)

    def test_invalid_fraction(self):
        with pytest.raises(ValueError):
            centre_roi((8, 8, 3), 0.0)


class TestCameraSource:

    def test_read_before_open(self):
        with pytest.raises(RuntimeError):
            CameraSource().read_frame()

    def test_close_without_open_is_noop(self):
        CameraSource().close()
