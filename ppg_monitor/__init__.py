"""
PPG Monitor — streaming heart-rate estimation from camera colour averages.
Place a fingertip over the camera lens; each frame is reduced to its mean
red/green/blue intensity and the green-channel history is turned into a
heart rate with a confidence grade.
"""

from .config import EngineConfig
from .rate import Confidence
from .report import HeartRateCategory, HeartRateReport
from .sample_buffer import Sample, SampleBuffer
from .session import (
    FrameStatus,
    PassOutcome,
    SessionController,
    SessionPhase,
    SessionStatus,
    SessionSummary,
)

__version__ = "0.1.0"
__author__ = "ppg_monitor"

__all__ = [
    "Confidence",
    "EngineConfig",
    "FrameStatus",
    "HeartRateCategory",
    "HeartRateReport",
    "PassOutcome",
    "Sample",
    "SampleBuffer",
    "SessionController",
    "SessionPhase",
    "SessionStatus",
    "SessionSummary",
]
