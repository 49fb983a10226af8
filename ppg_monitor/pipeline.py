"""
Detrend → band-limit → peaks → rate, over one buffered channel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import EngineConfig
from .filters import BandpassFilter, Detrender
from .peaks import PeakDetector
from .rate import RateEstimate, RateEstimator


@dataclass
class PipelineResult:
    filtered: np.ndarray
    peaks: List[int]
    estimate: Optional[RateEstimate]


class HeartRatePipeline:
    """Stateless composition of the per-pass stages."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.detrender = Detrender.from_config(self.config)
        self.bandpass = BandpassFilter.from_config(self.config)
        self.peak_detector = PeakDetector.from_config(self.config)
        self.estimator = RateEstimator(self.config)

    def run(self, signal: np.ndarray) -> PipelineResult:
        detrended = self.detrender.apply(signal)
        filtered = self.bandpass.apply(detrended)
        peaks = self.peak_detector.detect(filtered)
        return PipelineResult(
            filtered=filtered,
            peaks=peaks,
            estimate=self.estimator.estimate(peaks),
        )
