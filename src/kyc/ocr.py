"""OCR utilities for extracting Aadhaar card information.

The aggregator :func:`extract_fields` turns a raw Tesseract transcript into
an :class:`ExtractionResult`. It is a pure function: unrecognised fields are
``None`` with a ``False`` confidence flag, never an error.

:func:`extract_document` wraps it with the image side: decoding the upload
with Pillow, cleaning it up for OCR and running ``pytesseract``. Only that
part can fail, with :class:`OCRExtractionError`.
"""

from __future__ import annotations

import io
import logging

import pytesseract
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from .config import OCR_LANGUAGES, OCR_TARGET_WIDTH
from .extractors import extract_date_of_birth, extract_gender, extract_identifier, extract_name
from .schemas import ExtractedDocument, ExtractionResult, FieldConfidence

logger = logging.getLogger(__name__)


class OCRExtractionError(ValueError):
    """Raised when an uploaded image cannot be turned into a transcript."""


def extract_fields(transcript: str) -> ExtractionResult:
    """Run every field extractor over ``transcript``.

    No cross-field validation is done. Address and pincode are always left
    empty so the applicant enters them manually.
    """

    document = ExtractedDocument(
        name=extract_name(transcript),
        identifier_number=extract_identifier(transcript),
        date_of_birth=extract_date_of_birth(transcript),
        gender=extract_gender(transcript),
    )
    logger.info("Extracted: %s", document.model_dump())
    return ExtractionResult(
        document=document,
        confidence=FieldConfidence.from_document(document),
    )


def preprocess_image(image: Image.Image, target_width: int = OCR_TARGET_WIDTH) -> Image.Image:
    """Greyscale, stretch contrast and sharpen the card before OCR.

    Wide images are scaled down to ``target_width``; small ones are never
    enlarged. When any step fails the original image is returned unchanged.
    """

    try:
        processed = ImageOps.grayscale(image)
        processed = ImageOps.autocontrast(processed)
        processed = processed.filter(ImageFilter.SHARPEN)
        processed = ImageEnhance.Brightness(processed).enhance(1.2)
        processed = ImageEnhance.Contrast(processed).enhance(1.3)
        if processed.width > target_width:
            height = round(processed.height * target_width / processed.width)
            processed = processed.resize((target_width, height), Image.Resampling.LANCZOS)
        return processed
    except (OSError, ValueError) as exc:
        logger.warning("Preprocessing failed, using original image: %s", exc)
        return image


def read_transcript(image_bytes: bytes, *, languages: str = OCR_LANGUAGES) -> str:
    """Decode ``image_bytes`` and return the raw Tesseract transcript."""

    if not image_bytes:
        raise OCRExtractionError("The uploaded file appears to be empty.")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            image = preprocess_image(img.convert("RGB"))
    except OSError as exc:
        raise OCRExtractionError("Unable to open the uploaded image for OCR.") from exc

    logger.info("Starting OCR (%s)...", languages)
    try:
        transcript = pytesseract.image_to_string(image, lang=languages)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
        raise OCRExtractionError("Tesseract OCR failed to process the supplied image.") from exc

    logger.debug("Raw OCR text:\n%s", transcript)
    return transcript


def extract_document(image_bytes: bytes) -> ExtractionResult:
    """Run OCR on the provided image and return the recognised fields."""

    return extract_fields(read_transcript(image_bytes))
