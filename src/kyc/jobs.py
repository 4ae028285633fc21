"""KYC job bookkeeping behind an injectable key-value store."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol

from .schemas import (
    FaceVerificationRecord,
    JobStatus,
    KYCJob,
    KYCSubmission,
    VerificationReport,
)

logger = logging.getLogger(__name__)


class JobNotFoundError(KeyError):
    """Raised when a job id is not present in the store."""


class JobStore(Protocol):
    def get(self, job_id: str) -> Optional[KYCJob]: ...

    def put(self, job: KYCJob) -> None: ...


class InMemoryJobStore:
    """Process-local store; jobs are lost on restart."""

    def __init__(self) -> None:
        self._jobs: dict[str, KYCJob] = {}

    def get(self, job_id: str) -> Optional[KYCJob]:
        return self._jobs.get(job_id)

    def put(self, job: KYCJob) -> None:
        self._jobs[job.id] = job

    def __len__(self) -> int:
        return len(self._jobs)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_job(store: JobStore, submission: KYCSubmission) -> KYCJob:
    """Open a job for a reviewed submission, pending face verification."""

    if not submission.name.strip() or not submission.identifier_number.strip():
        raise ValueError("Name and Aadhaar number are required")

    job = KYCJob(
        id=str(uuid.uuid4()),
        name=submission.name.strip(),
        identifier_number=submission.identifier_number.strip(),
        date_of_birth=submission.date_of_birth,
        gender=submission.gender,
        address=submission.address,
        reference_descriptor=submission.reference_descriptor,
        created_at=_now(),
    )
    store.put(job)
    logger.info("KYC job created: %s", job.id)
    return job


def get_job(store: JobStore, job_id: str) -> KYCJob:
    job = store.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job


def record_face_verification(
    store: JobStore, job_id: str, report: VerificationReport
) -> KYCJob:
    """Store the verification result and move the job to its final status."""

    job = get_job(store, job_id)
    distance = report.match.distance
    updated = job.model_copy(
        update={
            "status": JobStatus.VERIFIED if report.outcome.matched else JobStatus.FAILED,
            "face_verification": FaceVerificationRecord(
                matched=report.outcome.matched,
                liveness_score=round(report.liveness.score, 3),
                distance=round(distance, 4) if math.isfinite(distance) else None,
                verified_at=_now(),
            ),
        }
    )
    store.put(updated)
    logger.info("KYC job %s -> %s", job_id, updated.status.value)
    return updated
