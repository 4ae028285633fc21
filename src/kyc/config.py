"""Runtime configuration for the KYC service.

Decision thresholds are fixed constants. Only deployment knobs can be
overridden through the environment.
"""

from __future__ import annotations

import os

# Maximum Euclidean distance between two face descriptors of the same person.
DISTANCE_THRESHOLD: float = 0.55

# Liveness score is ``tanh(variance / LIVENESS_SCALE)``.
LIVENESS_SCALE: float = 5000.0
LIVENESS_THRESHOLD: float = 0.35

# Leading 4-digit groups that are almost always a birth year, not an ID number.
BIRTH_YEAR_DENYLIST: frozenset[str] = frozenset({"1987", "1990", "2000"})

NOT_DETECTED = "Not detected"

OCR_LANGUAGES: str = os.getenv("KYC_OCR_LANGUAGES", "eng+hin")
OCR_TARGET_WIDTH: int = int(os.getenv("KYC_OCR_TARGET_WIDTH", "2000"))
MAX_UPLOAD_BYTES: int = int(os.getenv("KYC_MAX_UPLOAD_BYTES", str(6 * 1024 * 1024)))
LOG_LEVEL: str = os.getenv("KYC_LOG_LEVEL", "INFO").upper()
