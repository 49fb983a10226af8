"""
Unit tests for Detrender, BandpassFilter and PeakDetector.
Run with:  pytest tests/test_filters.py
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from ppg_monitor.config import EngineConfig
from ppg_monitor.filters import BandpassFilter, Detrender, filter_channel
from ppg_monitor.peaks import PeakDetector


def _reference_detrend(signal, window):
    out = []
    n = len(signal)
    for i in range(n):
        lo, hi = max(0, i - window), min(n - 1, i + window)
        out.append(signal[i] - sum(signal[lo:hi + 1]) / (hi - lo + 1))
    return np.array(out)


def _reference_bandpass(signal, low_alpha, high_alpha):
    low = [signal[0]]
    for x in signal[1:]:
        low.append(x * (1 - low_alpha) + low[-1] * low_alpha)
    high = [low[0]]
    for i in range(1, len(low)):
        high.append(low[i] - low[i - 1] + high_alpha * high[-1])
    return np.array(high)


# ---------------------------------------------------------------------------
# Detrender
# ---------------------------------------------------------------------------

class TestDetrender:

    def test_matches_clamped_window_definition(self):
        rng = np.random.default_rng(7)
        signal = rng.normal(100.0, 3.0, 200)
        out = Detrender(30).apply(signal)
        np.testing.assert_allclose(out, _reference_detrend(list(signal), 30), atol=1e-9)

    def test_length_preserved(self):
        assert len(Detrender(5).apply(np.ones(17))) == 17

    def test_constant_becomes_zero(self):
        out = Detrender(10).apply(np.full(50, 140.0))
        np.testing.assert_allclose(out, 0.0, atol=1e-9)

    def test_linear_ramp_cancelled_away_from_edges(self):
        ramp = np.arange(100, dtype=np.float64)
        out = Detrender(10).apply(ramp)
        np.testing.assert_allclose(out[10:90], 0.0, atol=1e-9)
        # Shrunk windows at the edges leave a residual rather than padding
        assert out[0] < 0
        assert out[-1] > 0

    def test_empty_signal(self):
        assert len(Detrender(3).apply(np.array([]))) == 0

    def test_window_from_config(self):
        assert Detrender.from_config(EngineConfig(sampling_frequency_hz=20.0)).window == 20


# ---------------------------------------------------------------------------
# BandpassFilter
# ---------------------------------------------------------------------------

class TestBandpassFilter:

    def test_coefficients(self):
        bp = BandpassFilter(fs=30.0, low_cutoff_hz=0.5, high_cutoff_hz=4.0)
        assert bp.low_alpha == pytest.approx(math.exp(-2 * math.pi * 0.5 / 30.0))
        assert bp.high_alpha == pytest.approx(math.exp(-2 * math.pi * 4.0 / 30.0))

    def test_matches_recursive_definition(self):
        rng = np.random.default_rng(3)
        signal = rng.normal(0.0, 1.0, 300)
        bp = BandpassFilter(fs=30.0)
        expected = _reference_bandpass(list(signal), bp.low_alpha, bp.high_alpha)
        np.testing.assert_allclose(bp.apply(signal), expected, atol=1e-9)

    def test_initial_conditions(self):
        bp = BandpassFilter(fs=30.0)
        signal = np.array([2.0, 1.0, 0.5])
        assert bp.lowpass(signal)[0] == pytest.approx(2.0)
        assert bp.apply(signal)[0] == pytest.approx(2.0)

    def test_constant_input_decays(self):
        out = BandpassFilter(fs=30.0).apply(np.full(100, 5.0))
        assert out[0] == pytest.approx(5.0)
        assert abs(out[-1]) < 1e-6

    def test_empty_signal(self):
        assert len(BandpassFilter(fs=30.0).apply(np.array([]))) == 0

    def test_filter_channel_keeps_pulse_period(self):
        fps = 30.0
        t = np.arange(450) / fps
        signal = 128 + 5 * np.sin(2 * np.pi * 1.2 * t) + 0.5 * t   # pulse + drift
        filtered = filter_channel(signal)
        peaks = PeakDetector(min_distance=15).detect(filtered)
        intervals = np.diff(peaks)
        assert np.median(intervals) == pytest.approx(25, abs=1)


# ---------------------------------------------------------------------------
# PeakDetector
# ---------------------------------------------------------------------------

def _spikes(n, heights):
    signal = np.zeros(n)
    for idx, h in heights.items():
        signal[idx] = h
    return signal


class TestPeakDetector:

    def test_well_separated_peaks(self):
        signal = _spikes(40, {5: 1.0, 20: 1.0, 35: 1.0})
        assert PeakDetector(min_distance=10).detect(signal) == [5, 20, 35]

    def test_close_taller_peak_replaces_previous(self):
        signal = _spikes(30, {5: 1.0, 9: 1.5})
        assert PeakDetector(min_distance=10).detect(signal) == [9]

    def test_close_shorter_peak_discarded(self):
        signal = _spikes(30, {5: 1.5, 9: 1.0})
        assert PeakDetector(min_distance=10).detect(signal) == [5]

    def test_low_amplitude_rejected(self):
        signal = _spikes(40, {5: 1.0, 20: 0.2, 35: 0.9})
        assert PeakDetector(min_distance=10, threshold_ratio=0.3).detect(signal) == [5, 35]

    def test_threshold_ratio_is_overridable(self):
        signal = _spikes(40, {5: 1.0, 20: 0.2})
        assert PeakDetector(min_distance=10, threshold_ratio=0.1).detect(signal) == [5, 20]

    def test_plateau_is_not_a_candidate(self):
        signal = np.array([0.0, 1.0, 1.0, 0.0, 0.0])
        assert PeakDetector(min_distance=1).detect(signal) == []

    def test_endpoints_excluded(self):
        signal = np.array([3.0, 0.0, 1.0, 0.0, 3.0])
        assert PeakDetector(min_distance=1).detect(signal) == [2]

    def test_short_signal(self):
        assert PeakDetector(min_distance=1).detect(np.array([1.0, 2.0])) == []

    def test_spacing_invariant_on_noise(self):
        rng = np.random.default_rng(11)
        signal = rng.normal(0.0, 1.0, 500)
        peaks = PeakDetector(min_distance=15).detect(signal)
        assert len(peaks) > 1
        assert all(b - a >= 15 for a, b in zip(peaks, peaks[1:]))

    def test_from_config(self):
        det = PeakDetector.from_config(EngineConfig())
        assert det.min_distance == 15
        assert det.threshold_ratio == 0.3
