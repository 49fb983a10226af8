"""
Detrending and band-limiting of a buffered channel.

Algorithm
---------
1. Subtract a centred moving average (half-width ≈ 1 s) to remove slow
   drift from ambient light changes and finger pressure.  Near the ends
   of the buffer the averaging window shrinks instead of being padded.
2. Run a single-pole smoothing stage (pole set by ``low_cutoff_hz``)
   followed by a first-difference stage (pole set by ``high_cutoff_hz``).
   The nominal band is 0.5 – 4 Hz (30 – 240 BPM).

This is a coarse recursive design, not a linear-phase filter; some
ringing after abrupt transients is expected.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from scipy.signal import lfilter

from .config import EngineConfig


class Detrender:
    """
    Centred moving-average detrender.

    Parameters
    ----------
    window:
        Half-width in samples; sample *i* is referenced to the mean of
        ``signal[i - window : i + window + 1]`` clipped to the buffer.
    """

    def __init__(self, window: int) -> None:
        if window < 1:
            raise ValueError("window must be >= 1")
        self.window = window

    @classmethod
    def from_config(cls, config: EngineConfig) -> "Detrender":
        return cls(config.detrend_window)

    def apply(self, signal: np.ndarray) -> np.ndarray:
        x = np.asarray(signal, dtype=np.float64)
        n = len(x)
        if n == 0:
            return x.copy()

        idx = np.arange(n)
        lo = np.maximum(idx - self.window, 0)
        hi = np.minimum(idx + self.window, n - 1)

        csum = np.concatenate(([0.0], np.cumsum(x)))
        moving_avg = (csum[hi + 1] - csum[lo]) / (hi - lo + 1)
        return x - moving_avg


class BandpassFilter:
    """
    Two cascaded single-pole IIR stages.

    Stage 1 (smoothing)::

        y[i] = x[i] * (1 - a_low) + y[i-1] * a_low,   y[0] = x[0]

    Stage 2 (difference)::

        z[i] = y[i] - y[i-1] + a_high * z[i-1],       z[0] = y[0]

    with ``a_low = exp(-2π·low_cutoff/fs)`` and
    ``a_high = exp(-2π·high_cutoff/fs)``.
    """

    def __init__(self, fs: float, low_cutoff_hz: float = 0.5, high_cutoff_hz: float = 4.0) -> None:
        if fs <= 0:
            raise ValueError("fs must be positive")
        self.fs = fs
        self.low_cutoff_hz = low_cutoff_hz
        self.high_cutoff_hz = high_cutoff_hz
        self.low_alpha = math.exp(-2.0 * math.pi * low_cutoff_hz / fs)
        self.high_alpha = math.exp(-2.0 * math.pi * high_cutoff_hz / fs)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "BandpassFilter":
        return cls(config.sampling_frequency_hz, config.low_cutoff_hz, config.high_cutoff_hz)

    def lowpass(self, signal: np.ndarray) -> np.ndarray:
        x = np.asarray(signal, dtype=np.float64)
        if len(x) == 0:
            return x.copy()
        a = self.low_alpha
        # Initial state chosen so that y[0] == x[0]
        y, _ = lfilter([1.0 - a], [1.0, -a], x, zi=[a * x[0]])
        return y

    def highpass(self, lowpassed: np.ndarray) -> np.ndarray:
        y = np.asarray(lowpassed, dtype=np.float64)
        if len(y) == 0:
            return y.copy()
        # Zero initial state gives z[0] == y[0]
        z, _ = lfilter([1.0, -1.0], [1.0, -self.high_alpha], y, zi=[0.0])
        return z

    def apply(self, signal: np.ndarray) -> np.ndarray:
        return self.highpass(self.lowpass(signal))


def filter_channel(signal: np.ndarray, config: Optional[EngineConfig] = None) -> np.ndarray:
    """Detrend then band-limit *signal* using *config* (defaults if omitted)."""
    config = config or EngineConfig()
    detrended = Detrender.from_config(config).apply(signal)
    return BandpassFilter.from_config(config).apply(detrended)
