"""
Engine configuration.

Every tunable constant of the heart-rate engine lives on
:class:`EngineConfig`.  The heuristic thresholds (peak amplitude ratio,
channel thresholds, variance bounds) are empirical, so they are kept as
named fields that callers and tests can override with
:func:`dataclasses.replace`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class EngineConfig:
    """
    Parameters
    ----------
    sampling_frequency_hz:
        Expected frame rate of the incoming samples.
    buffer_duration_seconds:
        Length of the sliding sample window.
    min_valid_seconds:
        Amount of buffered history required before a pipeline pass runs.
    recompute_interval_frames:
        Minimum number of frames between two pipeline passes.
    """

    # Buffering
    sampling_frequency_hz: float = 30.0
    buffer_duration_seconds: float = 15.0
    min_valid_seconds: float = 5.0
    recompute_interval_frames: int = 30

    # Detrending / band limits
    detrend_window_seconds: float = 1.0
    low_cutoff_hz: float = 0.5
    high_cutoff_hz: float = 4.0

    # Peak detection
    peak_threshold_ratio: float = 0.3
    min_peak_spacing_seconds: float = 0.5

    # Rate estimation
    min_bpm: float = 40.0
    max_bpm: float = 200.0
    history_size: int = 5
    variance_high_quality: float = 1.0
    variance_low_quality: float = 10.0

    # Confidence grading
    confidence_bpm_range: Tuple[float, float] = (40.0, 180.0)
    out_of_range_factor: float = 0.5
    high_confidence: float = 0.8
    medium_confidence: float = 0.5

    # Per-frame contact heuristic
    min_green: float = 50.0
    channel_diff: float = 10.0
    no_contact_score: float = 0.1
    good_contact_score: float = 0.9
    fair_contact_score: float = 0.5
    poor_contact_score: float = 0.2

    def __post_init__(self) -> None:
        if self.sampling_frequency_hz <= 0:
            raise ValueError("sampling_frequency_hz must be positive")
        if self.buffer_duration_seconds <= 0 or self.min_valid_seconds <= 0:
            raise ValueError("buffer and minimum durations must be positive")
        if self.min_valid_seconds > self.buffer_duration_seconds:
            raise ValueError("min_valid_seconds cannot exceed buffer_duration_seconds")
        if self.recompute_interval_frames < 1:
            raise ValueError("recompute_interval_frames must be >= 1")
        if not 0 < self.low_cutoff_hz < self.high_cutoff_hz:
            raise ValueError(
                f"invalid band {self.low_cutoff_hz}–{self.high_cutoff_hz} Hz"
            )
        if self.min_bpm >= self.max_bpm:
            raise ValueError("min_bpm must be below max_bpm")
        if self.history_size < 1:
            raise ValueError("history_size must be >= 1")
        if self.variance_high_quality >= self.variance_low_quality:
            raise ValueError("variance_high_quality must be below variance_low_quality")

    # ------------------------------------------------------------------
    # Derived sizes (in samples)
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return int(round(self.sampling_frequency_hz * self.buffer_duration_seconds))

    @property
    def min_valid_samples(self) -> int:
        return int(round(self.sampling_frequency_hz * self.min_valid_seconds))

    @property
    def detrend_window(self) -> int:
        """Half-width of the centred moving average."""
        return max(1, int(round(self.sampling_frequency_hz * self.detrend_window_seconds)))

    @property
    def min_peak_distance(self) -> int:
        return int(math.floor(self.min_peak_spacing_seconds * self.sampling_frequency_hz))
