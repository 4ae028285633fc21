"""Aadhaar KYC: card field extraction and selfie face verification."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .biometrics import check_liveness, compare_descriptors, verify_identity
from .ocr import extract_fields

if TYPE_CHECKING:  # pragma: no cover
    from .main import app as fastapi_app


def __getattr__(name: str):
    if name == "app":
        from .main import app as fastapi_app  # local import to avoid importing FastAPI eagerly

        return fastapi_app
    raise AttributeError(f"module 'kyc' has no attribute {name!r}")


__all__ = ["app", "check_liveness", "compare_descriptors", "extract_fields", "verify_identity"]
