"""Face match decision and liveness heuristic.

Descriptors are produced by an external face recognition model (one fixed
length float vector per image, or ``None`` when no face was found). This
module only compares them. Malformed input never raises: it resolves to an
infinite distance, which is always a non-match.

The liveness score is a coarse texture proxy computed from the variance of
the raw selfie bytes. It is NOT an anti-spoofing control: a printed photo or
a replayed screen with enough noise passes it.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .config import DISTANCE_THRESHOLD, LIVENESS_SCALE, LIVENESS_THRESHOLD
from .schemas import LivenessResult, MatchResult, VerificationOutcome, VerificationReport

logger = logging.getLogger(__name__)

Descriptor = Sequence[float]


def descriptor_distance(first: Optional[Descriptor], second: Optional[Descriptor]) -> float:
    """Return the Euclidean distance between two descriptors.

    Missing, empty or differently sized descriptors give ``math.inf``.
    """

    if first is None or second is None:
        return math.inf
    try:
        a = np.asarray(first, dtype=np.float64).ravel()
        b = np.asarray(second, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        logger.warning("Descriptor is not a numeric vector; treating as no match")
        return math.inf
    if a.size == 0 or a.shape != b.shape:
        return math.inf
    return float(np.sqrt(np.sum((a - b) ** 2)))


def compare_descriptors(
    first: Optional[Descriptor], second: Optional[Descriptor]
) -> MatchResult:
    distance = descriptor_distance(first, second)
    return MatchResult(
        distance=distance,
        matched=distance <= DISTANCE_THRESHOLD,
        threshold=DISTANCE_THRESHOLD,
    )


def pixel_variance(buffer: bytes) -> float:
    """Population variance of the raw byte values in ``buffer``."""

    values = np.frombuffer(buffer, dtype=np.uint8)
    if values.size == 0:
        return 0.0
    return float(values.astype(np.float64).var())


def liveness_score(variance: float) -> float:
    return math.tanh(variance / LIVENESS_SCALE)


def check_liveness(image_bytes: bytes) -> LivenessResult:
    """Score a selfie capture by the spread of its raw byte values."""

    score = liveness_score(pixel_variance(image_bytes))
    return LivenessResult(score=score, passed=score > LIVENESS_THRESHOLD)


def combine(match: MatchResult, liveness: LivenessResult) -> VerificationOutcome:
    return VerificationOutcome(matched=match.matched and liveness.passed)


def verify_identity(
    selfie_image: bytes,
    selfie_descriptor: Optional[Descriptor],
    reference_descriptor: Optional[Descriptor],
) -> VerificationReport:
    """Run the liveness check and the descriptor comparison for one selfie."""

    liveness = check_liveness(selfie_image)
    match = compare_descriptors(selfie_descriptor, reference_descriptor)
    outcome = combine(match, liveness)

    logger.info(
        "Face verification: distance=%.4f (threshold %.2f) liveness=%.3f -> %s",
        match.distance,
        match.threshold,
        liveness.score,
        "matched" if outcome.matched else "rejected",
    )
    return VerificationReport(match=match, liveness=liveness, outcome=outcome)
