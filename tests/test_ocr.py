"""Tests for the OCR parsing pipeline."""

from __future__ import annotations

from io import BytesIO
from unittest.mock import patch

import pytest
import pytesseract
from PIL import Image

from kyc.ocr import OCRExtractionError, extract_document, extract_fields, preprocess_image

OCR_TEXT = """
भारत सरकार
GOVERNMENT OF INDIA
नाम / Name: ASHA VERMA
जन्म तिथि / DOB: 05-06-1998
महिला / Female
1234 5678 9012
आधार - आम आदमी का अधिकार
""".strip()


@pytest.fixture()
def sample_image_bytes() -> bytes:
    """Return an in-memory PNG image suitable for OCR preprocessing."""

    image = Image.new("RGB", (256, 256), color=(240, 240, 240))
    with BytesIO() as buffer:
        image.save(buffer, format="PNG")
        return buffer.getvalue()


def test_extract_fields_reads_clean_card() -> None:
    result = extract_fields(
        "Name: Asha Verma\n1234 5678 9012\nDOB: 05/06/1998\n/ Female"
    )

    assert result.document.name == "Asha Verma"
    assert result.document.identifier_number == "1234 5678 9012"
    assert result.document.date_of_birth == "05/06/1998"
    assert result.document.gender == "Female"
    assert result.confidence.name
    assert result.confidence.identifier_number
    assert result.confidence.date_of_birth
    assert result.confidence.gender


def test_extract_fields_on_empty_transcript() -> None:
    result = extract_fields("")

    assert result.document.model_dump() == {
        "name": None,
        "identifier_number": None,
        "date_of_birth": None,
        "gender": None,
    }
    assert not any(result.confidence.model_dump().values())
    assert result.address is None
    assert result.pincode == ""


def test_address_is_never_extracted() -> None:
    result = extract_fields("Address: 12 MG Road, Bengaluru 560001\n" + OCR_TEXT)

    assert result.address is None
    assert result.pincode == ""
    assert result.confidence.address is False
    assert result.display_fields()["address"] == "Not detected"


def test_display_fields_use_not_detected_sentinel() -> None:
    fields = extract_fields("1234 5678 9012").display_fields()

    assert fields["identifier_number"] == "1234 5678 9012"
    assert fields["name"] == "Not detected"
    assert fields["gender"] == "Not detected"
    assert fields["confidence"]["identifier_number"] is True
    assert fields["confidence"]["name"] is False


def test_preprocess_image_never_enlarges() -> None:
    small = Image.new("RGB", (300, 200), color=(10, 20, 30))
    large = Image.new("RGB", (4000, 2000), color=(10, 20, 30))

    assert preprocess_image(small).size == (300, 200)
    assert preprocess_image(large, target_width=2000).size == (2000, 1000)
    assert preprocess_image(small).mode == "L"


@patch("kyc.ocr.pytesseract.image_to_string", return_value=OCR_TEXT)
def test_extract_document_returns_expected_data(mock_text, sample_image_bytes: bytes) -> None:
    result = extract_document(sample_image_bytes)

    assert result.document.name == "Asha Verma"
    assert result.document.identifier_number == "1234 5678 9012"
    assert result.document.date_of_birth == "05/06/1998"
    assert result.document.gender == "Female"
    assert mock_text.call_args.kwargs["lang"] == "eng+hin"


def test_extract_document_rejects_empty_upload() -> None:
    with pytest.raises(OCRExtractionError):
        extract_document(b"")


def test_extract_document_rejects_non_image() -> None:
    with pytest.raises(OCRExtractionError):
        extract_document(b"definitely not an image")


@patch(
    "kyc.ocr.pytesseract.image_to_string",
    side_effect=pytesseract.TesseractError(1, "boom"),
)
def test_extract_document_wraps_tesseract_failure(mock_text, sample_image_bytes: bytes) -> None:
    with pytest.raises(OCRExtractionError):
        extract_document(sample_image_bytes)
