"""Pydantic models used by the KYC extraction and face verification API."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .config import NOT_DETECTED


class ExtractedDocument(BaseModel):
    """Identity fields recognised on an Aadhaar card transcript."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(None, description="Card holder's name in Title Case.")
    identifier_number: Optional[str] = Field(
        None, description="Aadhaar number formatted as '#### #### ####'."
    )
    date_of_birth: Optional[str] = Field(
        None, description="Date of birth, or year of birth, as printed on the card."
    )
    gender: Optional[Literal["Male", "Female"]] = Field(None, description="Card holder's gender.")


class FieldConfidence(BaseModel):
    """Per-field flag telling whether the value was recognised."""

    model_config = ConfigDict(frozen=True)

    name: bool = False
    identifier_number: bool = False
    date_of_birth: bool = False
    gender: bool = False
    address: bool = False

    @classmethod
    def from_document(cls, document: ExtractedDocument) -> "FieldConfidence":
        return cls(
            name=document.name is not None,
            identifier_number=document.identifier_number is not None,
            date_of_birth=document.date_of_birth is not None,
            gender=document.gender is not None,
        )


class ExtractionResult(BaseModel):
    """Output of a single extraction call.

    The address and pincode are never read from the card; the applicant
    always types them in, so both are pinned to empty values here.
    """

    model_config = ConfigDict(frozen=True)

    document: ExtractedDocument
    confidence: FieldConfidence
    address: Optional[str] = None
    pincode: str = ""

    def display_fields(self) -> dict[str, object]:
        """Return the flat payload shown to the applicant for review."""

        document = self.document
        return {
            "name": document.name or NOT_DETECTED,
            "identifier_number": document.identifier_number or NOT_DETECTED,
            "date_of_birth": document.date_of_birth or NOT_DETECTED,
            "gender": document.gender or NOT_DETECTED,
            "address": NOT_DETECTED,
            "pincode": self.pincode,
            "confidence": self.confidence.model_dump(),
        }


class MatchResult(BaseModel):
    """Outcome of comparing two face descriptors."""

    model_config = ConfigDict(frozen=True)

    distance: float = Field(..., description="Euclidean distance; infinite for malformed input.")
    matched: bool
    threshold: float

    @field_serializer("distance", when_used="json")
    def _serialize_distance(self, distance: float) -> Optional[float]:
        # JSON has no infinity; a missing or malformed descriptor is sent as null.
        return distance if math.isfinite(distance) else None


class LivenessResult(BaseModel):
    """Variance based liveness heuristic. Not an anti-spoofing control."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0.0, le=1.0)
    passed: bool


class VerificationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: bool


class VerificationReport(BaseModel):
    """Descriptor match and liveness check together with the final decision."""

    model_config = ConfigDict(frozen=True)

    match: MatchResult
    liveness: LivenessResult
    outcome: VerificationOutcome


class JobStatus(str, Enum):
    PENDING_FACE_VERIFICATION = "pending_face_verification"
    VERIFIED = "verified"
    FAILED = "failed"


class KYCSubmission(BaseModel):
    """Details confirmed by the applicant after reviewing the extracted fields."""

    name: str = ""
    identifier_number: str = ""
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    reference_descriptor: Optional[list[float]] = Field(
        None, description="Face descriptor computed from the ID card photo."
    )


class FaceVerificationRecord(BaseModel):
    matched: bool
    liveness_score: float
    distance: Optional[float] = None
    verified_at: datetime


class KYCJob(BaseModel):
    """A KYC application awaiting or past face verification."""

    id: str
    name: str
    identifier_number: str
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    reference_descriptor: Optional[list[float]] = None
    status: JobStatus = JobStatus.PENDING_FACE_VERIFICATION
    created_at: datetime
    face_verification: Optional[FaceVerificationRecord] = None


class FaceVerificationRequest(BaseModel):
    """Selfie capture sent by the client for a pending job."""

    selfie_image: str = Field(
        ..., description="Base64 encoded selfie, optionally with a data URL prefix."
    )
    selfie_descriptor: Optional[list[float]] = Field(
        None, description="Face descriptor of the selfie; null when no face was found."
    )


class UploadResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class SubmitResponse(BaseModel):
    success: bool = True
    job_id: str


class JobResponse(BaseModel):
    success: bool = True
    job: KYCJob


class FaceVerificationResponse(BaseModel):
    success: bool = True
    job: KYCJob
    verification: VerificationReport
