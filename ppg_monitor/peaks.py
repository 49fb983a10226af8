"""
Beat peak detection on the band-limited signal.

A sample is a candidate when it is a strict local maximum.  Candidates
below ``threshold_ratio × max(signal)`` are rejected as noise.  Accepted
peaks must be at least ``min_distance`` samples apart; a candidate that
falls inside that distance replaces the previous peak only when it is
taller.

Every pass recomputes from scratch over the current window, so two
near-equal close maxima may swap places between consecutive passes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .config import EngineConfig

logger = logging.getLogger(__name__)


class PeakDetector:
    """
    Parameters
    ----------
    min_distance:
        Minimum spacing between accepted peaks, in samples.
    threshold_ratio:
        Fraction of the global maximum a candidate must exceed.
    """

    def __init__(self, min_distance: int, threshold_ratio: float = 0.3) -> None:
        if min_distance < 0:
            raise ValueError("min_distance must be >= 0")
        self.min_distance = min_distance
        self.threshold_ratio = threshold_ratio

    @classmethod
    def from_config(cls, config: EngineConfig) -> "PeakDetector":
        return cls(config.min_peak_distance, config.peak_threshold_ratio)

    def candidates(self, signal: np.ndarray) -> np.ndarray:
        """Indices of strict local maxima (endpoints excluded)."""
        x = np.asarray(signal, dtype=np.float64)
        if len(x) < 3:
            return np.array([], dtype=np.int64)
        mid = x[1:-1]
        mask = (mid > x[:-2]) & (mid > x[2:])
        return np.flatnonzero(mask) + 1

    def detect(self, signal: np.ndarray, threshold: Optional[float] = None) -> List[int]:
        """Return the accepted peak indices in increasing order."""
        x = np.asarray(signal, dtype=np.float64)
        if len(x) < 3:
            return []
        if threshold is None:
            threshold = self.threshold_ratio * float(np.max(x))

        peaks: List[int] = []
        for i in self.candidates(x):
            i = int(i)
            if x[i] <= threshold:
                continue
            if not peaks or i - peaks[-1] >= self.min_distance:
                peaks.append(i)
            elif x[i] > x[peaks[-1]]:
                peaks[-1] = i

        logger.debug("Detected %d peaks (threshold=%.4f)", len(peaks), threshold)
        return peaks
