"""
Measurement session controller.

Lifecycle
---------
    1. ``start_measurement()`` — resets all derived state, enters MEASURING.
    2. ``process_frame(sample)`` — once per video frame; returns a
       :class:`FrameStatus` every call.  Roughly once per second (every
       ``recompute_interval_frames`` frames, once enough history is
       buffered) the full detrend/filter/peak/rate pipeline runs on the
       green channel.
    3. ``stop_measurement()`` — enters STOPPED and returns a
       :class:`SessionSummary`.
    4. ``generate_report()`` — categorical summary of the final rate.

Noisy input never raises: each pipeline pass records a
:class:`PassOutcome` instead.  One controller handles one session at a
time; use one instance per concurrent session.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import numpy as np

from .config import EngineConfig
from .pipeline import HeartRatePipeline, PipelineResult
from .quality import SignalQualityAssessor
from .rate import (
    Confidence,
    HeartRateHistory,
    RateEstimate,
    RateEstimator,
    confidence_score,
    grade_confidence,
)
from .report import HeartRateReport, generate_report
from .sample_buffer import Sample, SampleBuffer
from .scheduling import FrameCadence

logger = logging.getLogger(__name__)

PPG_CHANNEL = "green"


class SessionPhase(str, enum.Enum):
    IDLE = "idle"
    MEASURING = "measuring"
    STOPPED = "stopped"


class SessionStatus(str, enum.Enum):
    STARTED = "started"
    MEASURING = "measuring"
    NOT_MEASURING = "not_measuring"
    STOPPED = "stopped"


class PassOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    INSUFFICIENT_DATA = "insufficient_data"
    NO_PEAKS = "no_peaks"
    OUT_OF_RANGE = "out_of_range"


@dataclass
class SessionState:
    buffer: SampleBuffer
    history: HeartRateHistory
    phase: SessionPhase = SessionPhase.IDLE
    frame_counter: int = 0
    last_processed_frame: int = 0
    start_time: Optional[float] = None
    stop_time: Optional[float] = None
    current_heart_rate: Optional[int] = None
    signal_quality: float = 0.0     # interval regularity of the last pass
    contact_quality: float = 0.0    # per-frame heuristic of the last frame
    last_outcome: Optional[PassOutcome] = None

    @classmethod
    def fresh(cls, config: EngineConfig) -> "SessionState":
        return cls(
            buffer=SampleBuffer(config.capacity),
            history=HeartRateHistory(config.history_size),
        )


@dataclass
class FrameStatus:
    status: SessionStatus
    frame: int
    signal_quality: float
    heart_rate: Optional[int]
    last_outcome: Optional[PassOutcome] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "frame": self.frame,
            "signal_quality": self.signal_quality,
            "heart_rate": self.heart_rate,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
        }


@dataclass
class SessionSummary:
    status: SessionStatus
    duration_seconds: float
    frames_processed: int
    frame_rate: float
    heart_rate: Optional[int]
    confidence: Confidence = field(default=Confidence.UNKNOWN)

    def to_dict(self) -> Dict[str, Any]:
        d = dataclasses.asdict(self)
        d["status"] = self.status.value
        d["confidence"] = self.confidence.value
        return d


class SessionController:
    """
    Owns the sample buffer, rate history and state machine of one session.

    Parameters
    ----------
    config:
        Engine parameters; defaults to :class:`EngineConfig()`.
    pipeline:
        Object with ``run(signal) -> PipelineResult``.  Defaults to
        :class:`HeartRatePipeline` built from *config*.
    cadence:
        Recompute policy; defaults to :class:`FrameCadence` from *config*.
    clock:
        Returns the current time in seconds (session duration only).
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        pipeline: Optional[HeartRatePipeline] = None,
        cadence: Optional[FrameCadence] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or EngineConfig()
        self.pipeline = pipeline or HeartRatePipeline(self.config)
        self.cadence = cadence or FrameCadence.from_config(self.config)
        self.assessor = SignalQualityAssessor(self.config)
        self.estimator = RateEstimator(self.config)
        self._clock = clock
        self.state = SessionState.fresh(self.config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def is_measuring(self) -> bool:
        return self.state.phase is SessionPhase.MEASURING

    def start_measurement(self) -> SessionStatus:
        """Discard any previous session and start measuring."""
        if self.state.phase is SessionPhase.MEASURING:
            logger.info("Restarting measurement; previous session discarded.")
        self.state = SessionState.fresh(self.config)
        self.state.phase = SessionPhase.MEASURING
        self.state.start_time = self._clock()
        logger.info(
            "Measurement started (fs=%.1f Hz, window=%d samples, min=%d samples)",
            self.config.sampling_frequency_hz,
            self.config.capacity,
            self.config.min_valid_samples,
        )
        return SessionStatus.STARTED

    def stop_measurement(self) -> SessionSummary:
        """Stop the session and summarise it.  Safe to call repeatedly."""
        st = self.state
        if st.phase is SessionPhase.IDLE:
            logger.warning("stop_measurement() called with no session running.")
            return self._summary(SessionStatus.NOT_MEASURING)
        if st.phase is SessionPhase.MEASURING:
            st.stop_time = self._clock()
            st.phase = SessionPhase.STOPPED
            logger.info(
                "Measurement stopped after %d frames; heart rate=%s",
                st.frame_counter,
                st.current_heart_rate,
            )
        return self._summary(SessionStatus.STOPPED)

    # ------------------------------------------------------------------
    # Per-frame processing
    # ------------------------------------------------------------------

    def process_frame(self, sample: Sample) -> FrameStatus:
        st = self.state
        if st.phase is not SessionPhase.MEASURING:
            return FrameStatus(
                status=SessionStatus.NOT_MEASURING,
                frame=st.frame_counter,
                signal_quality=0.0,
                heart_rate=st.current_heart_rate,
                last_outcome=st.last_outcome,
            )

        st.frame_counter += 1
        st.buffer.push(self._ordered(sample))
        st.contact_quality = self.assessor.score(sample)

        if self.cadence.is_due(st.frame_counter, st.last_processed_frame, len(st.buffer)):
            st.last_processed_frame = st.frame_counter
            self._recompute()
        elif not self.cadence.has_enough_data(len(st.buffer)):
            st.last_outcome = PassOutcome.INSUFFICIENT_DATA

        return FrameStatus(
            status=SessionStatus.MEASURING,
            frame=st.frame_counter,
            signal_quality=st.contact_quality,
            heart_rate=st.current_heart_rate,
            last_outcome=st.last_outcome,
        )

    # ------------------------------------------------------------------
    # Derived results
    # ------------------------------------------------------------------

    @property
    def current_heart_rate(self) -> Optional[int]:
        return self.state.current_heart_rate

    @property
    def confidence_score(self) -> float:
        st = self.state
        return confidence_score(
            st.current_heart_rate, len(st.history), st.signal_quality, self.config
        )

    @property
    def confidence(self) -> Confidence:
        st = self.state
        return grade_confidence(
            st.current_heart_rate, len(st.history), st.signal_quality, self.config
        )

    def duration(self) -> float:
        st = self.state
        if st.start_time is None:
            return 0.0
        end = st.stop_time if st.stop_time is not None else self._clock()
        return max(0.0, end - st.start_time)

    def generate_report(self) -> HeartRateReport:
        return generate_report(
            self.state.current_heart_rate,
            self.confidence,
            data_points=self.state.frame_counter,
            duration_seconds=self.duration(),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ordered(self, sample: Sample) -> Sample:
        latest = self.state.buffer.latest
        if latest is not None and sample.captured_at < latest.captured_at:
            logger.warning(
                "Out-of-order sample (%.4f < %.4f); clamping timestamp.",
                sample.captured_at,
                latest.captured_at,
            )
            return dataclasses.replace(sample, captured_at=latest.captured_at)
        return sample

    def _recompute(self) -> PassOutcome:
        buf = self.state.buffer
        logger.debug(
            "Pipeline pass at frame %d (%d samples, measured rate=%s Hz)",
            self.state.frame_counter,
            len(buf),
            buf.measured_rate(),
        )
        signal = buf.channel_history(PPG_CHANNEL)
        if not np.isfinite(signal).all():
            logger.warning(
                "Skipping pass at frame %d: %d non-finite samples in window",
                self.state.frame_counter,
                int(np.count_nonzero(~np.isfinite(signal))),
            )
            outcome = PassOutcome.INSUFFICIENT_DATA
        else:
            result: PipelineResult = self.pipeline.run(signal)
            outcome = self._apply_estimate(result.estimate)
        self.state.last_outcome = outcome
        return outcome

    def _apply_estimate(self, estimate: Optional[RateEstimate]) -> PassOutcome:
        st = self.state
        if estimate is None:
            logger.debug("Fewer than two peaks; keeping heart rate %s", st.current_heart_rate)
            return PassOutcome.NO_PEAKS

        st.signal_quality = estimate.quality
        if not self.estimator.is_plausible(estimate.bpm):
            logger.debug("Discarding implausible rate %d BPM", estimate.bpm)
            return PassOutcome.OUT_OF_RANGE

        st.history.push(estimate.bpm)
        st.current_heart_rate = st.history.smoothed()
        logger.info(
            "Heart rate %d BPM (pass=%d, quality=%.2f, history=%s)",
            st.current_heart_rate,
            estimate.bpm,
            estimate.quality,
            st.history.values(),
        )
        return PassOutcome.ACCEPTED

    def _summary(self, status: SessionStatus) -> SessionSummary:
        st = self.state
        duration = self.duration()
        return SessionSummary(
            status=status,
            duration_seconds=duration,
            frames_processed=st.frame_counter,
            frame_rate=st.frame_counter / duration if duration > 0 else 0.0,
            heart_rate=st.current_heart_rate,
            confidence=self.confidence,
        )
