"""Recompute cadence for the heavy filter/peak pipeline."""

from __future__ import annotations

from .config import EngineConfig


class FrameCadence:
    """
    Run a pass once ``interval_frames`` frames have elapsed since the
    last one, provided at least ``min_samples`` samples are buffered.
    """

    def __init__(self, interval_frames: int = 30, min_samples: int = 150) -> None:
        self.interval_frames = interval_frames
        self.min_samples = min_samples

    @classmethod
    def from_config(cls, config: EngineConfig) -> "FrameCadence":
        return cls(config.recompute_interval_frames, config.min_valid_samples)

    def has_enough_data(self, buffered: int) -> bool:
        return buffered >= self.min_samples

    def is_due(self, frame_counter: int, last_processed_frame: int, buffered: int) -> bool:
        return (
            frame_counter - last_processed_frame >= self.interval_frames
            and self.has_enough_data(buffered)
        )
