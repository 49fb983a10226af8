"""
Frame source and frame-to-sample reduction.

:func:`sample_from_frame` turns one BGR frame into the averaged
:class:`~ppg_monitor.sample_buffer.Sample` the engine consumes.
:class:`CameraSource` wraps picamera2 (on Raspberry Pi OS) or OpenCV
``VideoCapture`` and yields BGR frames; it is only used by the CLI.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional, Tuple

import cv2
import numpy as np

from .sample_buffer import Sample

logger = logging.getLogger(__name__)

try:
    from picamera2 import Picamera2
    _PICAMERA2_AVAILABLE = True
except ImportError:
    _PICAMERA2_AVAILABLE = False
    logger.debug("picamera2 not found – using OpenCV VideoCapture.")


def centre_roi(shape: Tuple[int, ...], fraction: float) -> Tuple[int, int, int, int]:
    """Return ``(x, y, w, h)`` of a centred box covering *fraction* of each side."""
    if not 0 < fraction <= 1:
        raise ValueError("fraction must be in (0, 1]")
    h, w = shape[:2]
    roi_w = max(1, int(w * fraction))
    roi_h = max(1, int(h * fraction))
    return (w - roi_w) // 2, (h - roi_h) // 2, roi_w, roi_h


def sample_from_frame(
    frame: np.ndarray,
    captured_at: float,
    roi_fraction: Optional[float] = None,
) -> Sample:
    """
    Average the channels of a BGR frame (H × W × 3).

    Parameters
    ----------
    frame:
        BGR image array.
    captured_at:
        Capture time in seconds.
    roi_fraction:
        When given, only a centred box of this relative size is averaged.
    """
    if frame.ndim != 3 or frame.shape[2] < 3:
        raise ValueError(f"expected an H×W×3 BGR frame, got shape {frame.shape}")
    if roi_fraction is not None:
        x, y, w, h = centre_roi(frame.shape, roi_fraction)
        frame = frame[y:y + h, x:x + w]
    blue, green, red = cv2.mean(np.ascontiguousarray(frame[:, :, :3]))[:3]
    return Sample(red=float(red), green=float(green), blue=float(blue), captured_at=captured_at)


class CameraSource:
    """
    Parameters
    ----------
    resolution:
        (width, height) of captured frames.
    fps:
        Target frame rate.  Actual rate may differ slightly.
    camera_index:
        OpenCV camera index used when picamera2 is unavailable.
    """

    def __init__(
        self,
        resolution: Tuple[int, int] = (640, 480),
        fps: int = 30,
        camera_index: int = 0,
    ) -> None:
        self.resolution = resolution
        self.fps = fps
        self.camera_index = camera_index

        self._cam: "Picamera2 | cv2.VideoCapture | None" = None
        self._use_picamera2 = _PICAMERA2_AVAILABLE

    def open(self) -> None:
        if self._use_picamera2:
            self._open_picamera2()
        else:
            self._open_opencv()
        logger.info(
            "Camera opened – backend=%s resolution=%s fps=%d",
            "picamera2" if self._use_picamera2 else "opencv",
            self.resolution,
            self.fps,
        )

    def close(self) -> None:
        if self._cam is None:
            return
        if self._use_picamera2:
            self._cam.stop()
            self._cam.close()
        else:
            self._cam.release()
        self._cam = None
        logger.info("Camera closed.")

    def __enter__(self) -> "CameraSource":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    def read_frame(self) -> np.ndarray | None:
        """Capture a single BGR frame, or *None* on failure."""
        if self._cam is None:
            raise RuntimeError("Camera is not open.  Call open() first.")
        if self._use_picamera2:
            frame = cv2.cvtColor(self._cam.capture_array("main"), cv2.COLOR_RGB2BGR)
        else:
            ok, frame = self._cam.read()
            if not ok:
                logger.warning("VideoCapture.read() returned False.")
                return None
        return frame

    def frames(self) -> Generator[np.ndarray, None, None]:
        """Yield frames until the camera is closed or keeps failing."""
        null_streak = 0
        while self._cam is not None:
            frame = self.read_frame()
            if frame is None:
                null_streak += 1
                if null_streak >= 10:
                    logger.error("Camera returned 10 consecutive empty frames – aborting.")
                    break
                continue
            null_streak = 0
            yield frame

    def _open_picamera2(self) -> None:
        cam = Picamera2()
        w, h = self.resolution
        config = cam.create_video_configuration(
            main={"size": (w, h), "format": "RGB888"},
            buffer_count=4,
        )
        cam.configure(config)
        cam.start()
        self._cam = cam

    def _open_opencv(self) -> None:
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            raise RuntimeError(
                f"Cannot open video capture device index={self.camera_index}"
            )
        w, h = self.resolution
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cam = cap
