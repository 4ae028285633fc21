"""Tests for the KYC job store helpers."""

from __future__ import annotations

import pytest

from kyc.biometrics import verify_identity
from kyc.jobs import (
    InMemoryJobStore,
    JobNotFoundError,
    create_job,
    get_job,
    record_face_verification,
)
from kyc.schemas import JobStatus, KYCSubmission

DESCRIPTOR = [0.05] * 128
LIVE_SELFIE = bytes(range(256)) * 16
STATIC_SELFIE = bytes([127]) * 4096


@pytest.fixture()
def store() -> InMemoryJobStore:
    return InMemoryJobStore()


def _submit(store: InMemoryJobStore, **overrides) -> str:
    data = {
        "name": "Asha Verma",
        "identifier_number": "1234 5678 9012",
        "date_of_birth": "05/06/1998",
        "gender": "Female",
        "reference_descriptor": DESCRIPTOR,
    }
    data.update(overrides)
    return create_job(store, KYCSubmission(**data)).id


def test_create_job_starts_pending(store: InMemoryJobStore) -> None:
    job_id = _submit(store)
    job = get_job(store, job_id)

    assert len(store) == 1
    assert job.status is JobStatus.PENDING_FACE_VERIFICATION
    assert job.name == "Asha Verma"
    assert job.face_verification is None


@pytest.mark.parametrize("field", ["name", "identifier_number"])
def test_create_job_requires_name_and_number(store: InMemoryJobStore, field: str) -> None:
    with pytest.raises(ValueError):
        _submit(store, **{field: "  "})
    assert len(store) == 0


def test_unknown_job(store: InMemoryJobStore) -> None:
    with pytest.raises(JobNotFoundError):
        get_job(store, "missing")


def test_matching_selfie_verifies_job(store: InMemoryJobStore) -> None:
    job_id = _submit(store)
    report = verify_identity(LIVE_SELFIE, DESCRIPTOR, DESCRIPTOR)

    job = record_face_verification(store, job_id, report)

    assert job.status is JobStatus.VERIFIED
    assert job.face_verification.matched is True
    assert job.face_verification.distance == 0.0
    assert get_job(store, job_id).status is JobStatus.VERIFIED


def test_static_selfie_fails_job(store: InMemoryJobStore) -> None:
    job_id = _submit(store)
    report = verify_identity(STATIC_SELFIE, DESCRIPTOR, DESCRIPTOR)

    job = record_face_verification(store, job_id, report)

    assert job.status is JobStatus.FAILED
    assert job.face_verification.liveness_score == 0.0


def test_missing_reference_descriptor_fails_job(store: InMemoryJobStore) -> None:
    job_id = _submit(store, reference_descriptor=None)
    report = verify_identity(LIVE_SELFIE, DESCRIPTOR, None)

    job = record_face_verification(store, job_id, report)

    assert job.status is JobStatus.FAILED
    assert job.face_verification.distance is None
