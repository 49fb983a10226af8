"""
Per-frame contact quality.

With a fingertip pressed on the lens and the torch lit, the frame is a
fairly bright, uniform field.  This module scores a single averaged
sample by comparing its channels; the result is advisory feedback for
the user and does not gate the heart-rate pipeline.
"""

from __future__ import annotations

from typing import Optional

from .config import EngineConfig
from .sample_buffer import Sample


class SignalQualityAssessor:
    """
    Heuristic score in [0, 1] for how well the sensor is engaged.

    Thresholds and scores come from :class:`EngineConfig`
    (``min_green``, ``channel_diff`` and the four ``*_contact_score``
    fields).
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def score(self, sample: Sample) -> float:
        cfg = self.config
        red, green, blue = sample.red, sample.green, sample.blue

        if green < cfg.min_green:
            return cfg.no_contact_score
        if green > red + cfg.channel_diff and green > blue + cfg.channel_diff:
            return cfg.good_contact_score
        if green > red and green > blue:
            return cfg.fair_contact_score
        return cfg.poor_contact_score
