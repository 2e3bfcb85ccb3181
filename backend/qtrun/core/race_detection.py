"""Rule-based race detection.

An activity is scored against a table of independent signals (distance
close to a standard race distance, race words in the title, Strava's own
race flag, a very high suffer score). Each signal that fires adds
``weight × strength`` to the confidence and explains itself with one or
more reason strings. Adding a signal means adding a row to
``RACE_SIGNALS``; ``detect_race`` never changes.
"""

from typing import Callable, NamedTuple, Optional

from qtrun.core.constants import (
    HIGH_SUFFER_SCORE,
    RACE_KEYWORDS,
    STRAVA_RACE_WORKOUT_TYPES,
)
from qtrun.schemas.metrics import RaceCandidate, RaceDetectionResult, StandardDistance


STANDARD_DISTANCES: tuple[StandardDistance, ...] = (
    StandardDistance(name="1 Mile", meters=1609, tolerance=0.03),
    StandardDistance(name="5K", meters=5000, tolerance=0.02),
    StandardDistance(name="10K", meters=10000, tolerance=0.02),
    StandardDistance(name="15K", meters=15000, tolerance=0.02),
    StandardDistance(name="10 Mile", meters=16093, tolerance=0.02),
    StandardDistance(name="Half Marathon", meters=21097, tolerance=0.02),
    StandardDistance(name="Marathon", meters=42195, tolerance=0.015),
    StandardDistance(name="50K", meters=50000, tolerance=0.03),
    StandardDistance(name="50 Mile", meters=80467, tolerance=0.03),
    StandardDistance(name="100K", meters=100000, tolerance=0.03),
    StandardDistance(name="100 Mile", meters=160934, tolerance=0.03),
)


class SignalOutcome(NamedTuple):
    strength: float  # 0..1, scaled by the signal's weight
    reasons: list[str]


class RaceSignal(NamedTuple):
    name: str
    weight: float
    evaluate: Callable[[RaceCandidate], Optional[SignalOutcome]]


def match_standard_distance(distance_m: Optional[float]) -> Optional[tuple[StandardDistance, float]]:
    """Find the standard distance whose tolerance window contains ``distance_m``.

    Returns the matching entry and a closeness score in [0.5, 1]: 1 for an
    exact match, falling linearly toward the edge of the window.
    """
    if not distance_m:
        return None

    for std in STANDARD_DISTANCES:
        lower = std.meters * (1 - std.tolerance)
        upper = std.meters * (1 + std.tolerance)
        if lower <= distance_m <= upper:
            deviation = abs(distance_m - std.meters) / std.meters
            closeness = 1 - (deviation / std.tolerance)
            return std, max(0.5, closeness)
    return None


def find_race_keywords(title: Optional[str]) -> list[str]:
    """Return the race keywords contained in ``title``, in table order.

    Plain substring match on the lowercased title, so "Ultramarathon"
    yields both "marathon" and "ultra".
    """
    if not title:
        return []
    lowered = title.lower()
    return [kw for kw in RACE_KEYWORDS if kw in lowered]


def _distance_signal(candidate: RaceCandidate) -> Optional[SignalOutcome]:
    match = match_standard_distance(candidate.distance)
    if match is None:
        return None
    std, closeness = match
    km = candidate.distance / 1000
    return SignalOutcome(closeness, [f"Distance {km:.2f}km matches {std.name} within tolerance"])


def _keyword_signal(candidate: RaceCandidate) -> Optional[SignalOutcome]:
    keywords = find_race_keywords(candidate.activity_name)
    if not keywords:
        return None
    # More keywords = higher confidence, capped at 0.9
    strength = min(0.9, 0.5 + len(keywords) * 0.1)
    return SignalOutcome(strength, [f"Title contains '{kw}'" for kw in keywords])


def _workout_type_signal(candidate: RaceCandidate) -> Optional[SignalOutcome]:
    if candidate.workout_type not in STRAVA_RACE_WORKOUT_TYPES:
        return None
    return SignalOutcome(0.9, ["Marked as race in Strava"])


def _suffer_score_signal(candidate: RaceCandidate) -> Optional[SignalOutcome]:
    if not candidate.suffer_score or candidate.suffer_score <= HIGH_SUFFER_SCORE:
        return None
    return SignalOutcome(1.0, [f"High intensity (Suffer Score: {candidate.suffer_score})"])


RACE_SIGNALS: tuple[RaceSignal, ...] = (
    RaceSignal("distance", 0.4, _distance_signal),
    RaceSignal("keywords", 0.35, _keyword_signal),
    RaceSignal("workout_type", 0.25, _workout_type_signal),
    RaceSignal("suffer_score", 0.3, _suffer_score_signal),
)


def detect_race(candidate: RaceCandidate) -> RaceDetectionResult:
    """Score one activity as a possible race.

    Confidence is the weighted sum of the signals that fired, capped at 1.
    With no signals the result has confidence 0, no distance class and no
    reasons. Nothing is persisted; callers decide what to do with it.
    """
    confidence = 0.0
    reasons: list[str] = []
    for signal in RACE_SIGNALS:
        outcome = signal.evaluate(candidate)
        if outcome is None:
            continue
        confidence += signal.weight * outcome.strength
        reasons.extend(outcome.reasons)

    match = match_standard_distance(candidate.distance)

    return RaceDetectionResult(
        activity_id=candidate.activity_id,
        activity_name=candidate.activity_name or "Untitled",
        date=candidate.date,
        distance=candidate.distance or 0.0,
        detected_distance_class=match[0].name if match else None,
        confidence=min(1.0, confidence),
        reasons=reasons,
    )


def is_likely_race(result: RaceDetectionResult, threshold: float = 0.4) -> bool:
    """Batch scans only surface results with a fired signal above ``threshold``."""
    return bool(result.reasons) and result.confidence > threshold
