"""
Clinical-style summary of a measured heart rate.

Buckets (BPM): Bradycardia < 60, Normal 60 – 100, Elevated 101 – 120,
Tachycardia > 120.  Text is advisory only.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .rate import Confidence


class HeartRateCategory(str, enum.Enum):
    BRADYCARDIA = "Bradycardia"
    NORMAL = "Normal"
    ELEVATED = "Elevated"
    TACHYCARDIA = "Tachycardia"
    UNKNOWN = "unknown"


_MESSAGES = {
    HeartRateCategory.BRADYCARDIA: (
        "Your heart rate is below the typical resting range (60-100 BPM). "
        "This can be normal for athletes or during sleep."
    ),
    HeartRateCategory.NORMAL: (
        "Your heart rate is within the typical resting range (60-100 BPM)."
    ),
    HeartRateCategory.ELEVATED: (
        "Your heart rate is elevated above the typical resting range. "
        "This can be normal during light activity or stress."
    ),
    HeartRateCategory.TACHYCARDIA: (
        "Your heart rate is significantly elevated above the typical resting "
        "range. This can be normal during exercise."
    ),
    HeartRateCategory.UNKNOWN: "Not enough data collected to determine heart rate.",
}

CONSULT_PROVIDER = (
    "Consider consulting with a healthcare provider if this is your typical "
    "resting heart rate."
)
REST_AND_REMEASURE = (
    "Try to relax and measure again when you've been at rest for at least "
    "10 minutes."
)
MENTION_LOW_RATE = (
    "If you're not an athlete and regularly have a low heart rate, mention "
    "this to your doctor at your next check-up."
)


@dataclass
class HeartRateReport:
    heart_rate: Optional[int]
    confidence: Confidence
    category: HeartRateCategory
    message: str
    recommendations: List[str] = field(default_factory=list)
    data_points: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["confidence"] = self.confidence.value
        d["category"] = self.category.value
        return d


def categorize(heart_rate: Optional[int]) -> HeartRateCategory:
    if not heart_rate:
        return HeartRateCategory.UNKNOWN
    if heart_rate < 60:
        return HeartRateCategory.BRADYCARDIA
    if heart_rate <= 100:
        return HeartRateCategory.NORMAL
    if heart_rate <= 120:
        return HeartRateCategory.ELEVATED
    return HeartRateCategory.TACHYCARDIA


def recommendations_for(heart_rate: Optional[int]) -> List[str]:
    if not heart_rate:
        return []
    recs = []
    if heart_rate < 50 or heart_rate > 120:
        recs.append(CONSULT_PROVIDER)
    if heart_rate > 100:
        recs.append(REST_AND_REMEASURE)
    if heart_rate < 60:
        recs.append(MENTION_LOW_RATE)
    return recs


def generate_report(
    heart_rate: Optional[int],
    confidence: Confidence,
    data_points: int = 0,
    duration_seconds: float = 0.0,
) -> HeartRateReport:
    """Build the report for *heart_rate*; an 'unknown' report if it is unset."""
    category = categorize(heart_rate)
    if category is HeartRateCategory.UNKNOWN:
        return HeartRateReport(
            heart_rate=None,
            confidence=Confidence.UNKNOWN,
            category=category,
            message=_MESSAGES[category],
            data_points=data_points,
            duration_seconds=duration_seconds,
        )
    return HeartRateReport(
        heart_rate=heart_rate,
        confidence=confidence,
        category=category,
        message=_MESSAGES[category],
        recommendations=recommendations_for(heart_rate),
        data_points=data_points,
        duration_seconds=duration_seconds,
    )
