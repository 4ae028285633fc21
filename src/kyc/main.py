"""FastAPI application exposing the Aadhaar KYC workflow.

1. ``POST /api/kyc/upload`` reads the card and returns the recognised fields.
2. ``POST /api/kyc/submit`` stores the reviewed details as a pending job.
3. ``POST /api/kyc/verify-face/{job_id}`` checks the selfie against the card.
"""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware

from .biometrics import verify_identity
from .config import LOG_LEVEL, MAX_UPLOAD_BYTES
from .jobs import (
    InMemoryJobStore,
    JobNotFoundError,
    JobStore,
    create_job,
    get_job,
    record_face_verification,
)
from .ocr import OCRExtractionError, extract_document
from .schemas import (
    FaceVerificationRequest,
    FaceVerificationResponse,
    JobResponse,
    KYCSubmission,
    SubmitResponse,
    UploadResponse,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Aadhaar KYC API",
    version="0.1.0",
    description=(
        "Upload an Aadhaar card image to receive its name, number, date of birth "
        "and gender, then confirm the applicant with a selfie face match."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SUPPORTED_IMAGE_TYPES: Iterable[str] = {
    "image/jpeg",
    "image/png",
    "image/jpg",
    "image/webp",
}

_job_store = InMemoryJobStore()


class ImageDecodingError(ValueError):
    """Raised when the selfie payload is not valid base64 or is too large."""


def get_job_store() -> JobStore:
    """Dependency returning the job store; override it in tests."""

    return _job_store


def decode_base64_image(payload: str) -> bytes:
    """Decode a base64 image, with or without a ``data:...;base64,`` prefix."""

    if ";base64," in payload:
        payload = payload.split(";base64,", 1)[1]
    elif "," in payload:
        payload = payload.split(",", 1)[1]

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodingError(f"Failed to decode base64 image: {exc}") from exc
    if not data:
        raise ImageDecodingError("Selfie image is empty.")
    if len(data) > MAX_UPLOAD_BYTES:
        raise ImageDecodingError(f"Selfie too large; the limit is {MAX_UPLOAD_BYTES} bytes.")
    return data


@app.get("/api/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """Simple endpoint to verify that the API is running."""

    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/kyc/upload", response_model=UploadResponse)
async def upload_card(
    aadhaar: Optional[UploadFile] = File(None, description="Image of the Aadhaar card."),
) -> UploadResponse:
    """Run OCR on the uploaded card and return the fields for review."""

    if aadhaar is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    if aadhaar.content_type not in SUPPORTED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type. Upload a JPEG, PNG or WEBP image.",
        )

    try:
        contents = await aadhaar.read()
        if len(contents) > MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File too large; the limit is {MAX_UPLOAD_BYTES} bytes.",
            )
        logger.info("Received file: %s (%d bytes)", aadhaar.filename, len(contents))
        result = extract_document(contents)
    except OCRExtractionError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    finally:
        await aadhaar.close()

    return UploadResponse(data=result.display_fields())


@app.post("/api/kyc/submit", response_model=SubmitResponse)
async def submit_details(
    submission: KYCSubmission,
    store: JobStore = Depends(get_job_store),
) -> SubmitResponse:
    try:
        job = create_job(store, submission)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SubmitResponse(job_id=job.id)


@app.get("/api/kyc/job/{job_id}", response_model=JobResponse)
async def read_job(job_id: str, store: JobStore = Depends(get_job_store)) -> JobResponse:
    try:
        return JobResponse(job=get_job(store, job_id))
    except JobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found") from exc


@app.post("/api/kyc/verify-face/{job_id}", response_model=FaceVerificationResponse)
async def verify_face(
    job_id: str,
    request_data: FaceVerificationRequest,
    store: JobStore = Depends(get_job_store),
) -> FaceVerificationResponse:
    """Compare the selfie with the card photo and settle the job status."""

    try:
        job = get_job(store, job_id)
        selfie = decode_base64_image(request_data.selfie_image)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found") from exc
    except ImageDecodingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    report = verify_identity(selfie, request_data.selfie_descriptor, job.reference_descriptor)
    job = record_face_verification(store, job_id, report)
    return FaceVerificationResponse(job=job, verification=report)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
