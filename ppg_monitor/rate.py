"""
Heart-rate estimation from peak intervals, smoothing and confidence.

The rate of one pass is ``60 / mean_interval_seconds``.  The variance of
the raw (sample-count) intervals maps linearly to a regularity score:
variance <= ``variance_high_quality`` gives 1.0, variance >=
``variance_low_quality`` gives 0.0.

Accepted rates are smoothed over a short FIFO history and the reported
heart rate is the rounded mean of that history.  Confidence combines how
full the history is, whether the rate is in a plausible resting range,
and the regularity score.
"""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Sequence

import numpy as np

from .config import EngineConfig


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RateEstimate:
    bpm: int
    mean_interval: float      # samples
    interval_variance: float  # samples²
    quality: float            # 0 – 1


class RateEstimator:
    """Turns a peak set into a :class:`RateEstimate`."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def estimate(self, peaks: Sequence[int]) -> Optional[RateEstimate]:
        """
        Return the estimate for *peaks*, or *None* with fewer than two peaks.

        The BPM is rounded to the nearest integer.  It is not range-checked
        here; see :meth:`is_plausible`.
        """
        if len(peaks) < 2:
            return None

        intervals = np.diff(np.asarray(peaks, dtype=np.float64))
        mean_interval = float(intervals.mean())
        if mean_interval <= 0:
            return None

        seconds = mean_interval / self.config.sampling_frequency_hz
        bpm = int(round(60.0 / seconds))
        variance = float(np.mean((intervals - mean_interval) ** 2))
        return RateEstimate(
            bpm=bpm,
            mean_interval=mean_interval,
            interval_variance=variance,
            quality=self.quality_from_variance(variance),
        )

    def quality_from_variance(self, variance: float) -> float:
        hi = self.config.variance_high_quality
        lo = self.config.variance_low_quality
        if variance <= hi:
            return 1.0
        if variance >= lo:
            return 0.0
        return 1.0 - (variance - hi) / (lo - hi)

    def is_plausible(self, bpm: float) -> bool:
        return self.config.min_bpm <= bpm <= self.config.max_bpm


class HeartRateHistory:
    """Bounded FIFO of recently accepted BPM values."""

    def __init__(self, maxlen: int = 5) -> None:
        self._values: Deque[int] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    @property
    def maxlen(self) -> int:
        return self._values.maxlen

    def push(self, bpm: int) -> None:
        self._values.append(bpm)

    def clear(self) -> None:
        self._values.clear()

    def values(self) -> List[int]:
        return list(self._values)

    def smoothed(self) -> Optional[int]:
        """Rounded mean of the history, *None* when empty."""
        if not self._values:
            return None
        return int(round(sum(self._values) / len(self._values)))


def confidence_score(
    heart_rate: Optional[int],
    history_length: int,
    signal_quality: float,
    config: Optional[EngineConfig] = None,
) -> float:
    """Numeric confidence in [0, 1]; 0.0 when no rate is established."""
    config = config or EngineConfig()
    if not heart_rate:
        return 0.0
    history_factor = min(1.0, history_length / config.history_size)
    low, high = config.confidence_bpm_range
    range_factor = 1.0 if low <= heart_rate <= high else config.out_of_range_factor
    return history_factor * range_factor * signal_quality


def grade_confidence(
    heart_rate: Optional[int],
    history_length: int,
    signal_quality: float,
    config: Optional[EngineConfig] = None,
) -> Confidence:
    config = config or EngineConfig()
    if not heart_rate:
        return Confidence.UNKNOWN
    score = confidence_score(heart_rate, history_length, signal_quality, config)
    if score > config.high_confidence:
        return Confidence.HIGH
    if score > config.medium_confidence:
        return Confidence.MEDIUM
    return Confidence.LOW
