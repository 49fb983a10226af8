from __future__ import annotations

import numpy as np
import pytest

from ppg_monitor.sample_buffer import Sample


class FakeClock:
    """Manually advanced clock for session durations."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def ppg_samples(
    n: int,
    fps: float = 30.0,
    freq_hz: float = 1.2,
    amplitude: float = 5.0,
    baseline: float = 128.0,
    red: float = 60.0,
    blue: float = 60.0,
):
    """Samples whose green channel is ``baseline + amplitude·sin(2π·f·t)``."""
    t = np.arange(n) / fps
    green = baseline + amplitude * np.sin(2 * np.pi * freq_hz * t)
    return [Sample(red=red, green=float(g), blue=blue, captured_at=float(ts))
            for g, ts in zip(green, t)]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
