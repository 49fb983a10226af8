"""
Sliding window of time-stamped colour samples.

One :class:`Sample` is produced per video frame (the mean red, green and
blue intensity of the frame plus its capture time).  :class:`SampleBuffer`
keeps the most recent ``capacity`` samples; pushing into a full buffer
evicts the oldest entry.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import numpy as np

CHANNELS = ("red", "green", "blue")


@dataclass(frozen=True)
class Sample:
    """Averaged channel intensities of one frame, ``captured_at`` in seconds."""

    red: float
    green: float
    blue: float
    captured_at: float


class SampleBuffer:
    """
    Fixed-capacity FIFO of :class:`Sample` objects.

    Parameters
    ----------
    capacity:
        Maximum number of samples held.  Typically
        ``sampling_frequency_hz * buffer_duration_seconds``.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._samples: Deque[Sample] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    @property
    def fill_ratio(self) -> float:
        """How full the buffer is (0 – 1)."""
        return len(self._samples) / self._samples.maxlen

    @property
    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def push(self, sample: Sample) -> None:
        """Append *sample*, evicting the oldest entry when full."""
        last = self.latest
        if last is not None and sample.captured_at < last.captured_at:
            raise ValueError(
                f"sample captured at {sample.captured_at} precedes "
                f"buffered sample at {last.captured_at}"
            )
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def channel_history(self, channel: str) -> np.ndarray:
        """
        Return one channel's buffered values in chronological order.

        The result is a fresh array; later pushes never alter it.
        """
        if channel not in CHANNELS:
            raise ValueError(f"unknown channel {channel!r}, expected one of {CHANNELS}")
        return np.fromiter(
            (getattr(s, channel) for s in self._samples),
            dtype=np.float64,
            count=len(self._samples),
        )

    def timestamps(self) -> np.ndarray:
        return np.fromiter(
            (s.captured_at for s in self._samples),
            dtype=np.float64,
            count=len(self._samples),
        )

    def measured_rate(self) -> Optional[float]:
        """
        Samples per second derived from the real capture timestamps.

        Returns *None* with fewer than two samples or a zero time span.
        """
        if len(self._samples) < 2:
            return None
        span = self._samples[-1].captured_at - self._samples[0].captured_at
        if span <= 0:
            return None
        return (len(self._samples) - 1) / span
