"""Field extractors for noisy Aadhaar OCR transcripts.

Each field is recognised by a *cascade*: an ordered tuple of strategies,
each a pure ``str -> Optional[str]`` function. Strategies are tried from the
most specific pattern to the loosest one and the first value produced wins.
A field that no strategy recognises is returned as ``None``; extractors
never raise.
"""

from __future__ import annotations

import re
from re import Pattern
from typing import Callable, Iterable, Literal, Optional, cast

from .config import BIRTH_YEAR_DENYLIST
from .normalize import collapse_whitespace, join_lines, title_case

Strategy = Callable[[str], Optional[str]]
Gender = Literal["Male", "Female"]

# ASCII semantics for \d, \b and \s so Devanagari digits never leak into
# the canonical identifier or date formats.
_FLAGS = re.ASCII
_IFLAGS = re.ASCII | re.IGNORECASE


def run_cascade(strategies: Iterable[Strategy], text: str) -> Optional[str]:
    """Return the value of the first strategy that recognises ``text``."""

    for strategy in strategies:
        value = strategy(text)
        if value is not None:
            return value
    return None


def _format_identifier(digits: str) -> str:
    return f"{digits[0:4]} {digits[4:8]} {digits[8:12]}"


# ---------------------------------------------------------------------------
# Identifier (12-digit Aadhaar number)
# ---------------------------------------------------------------------------

# Zero-width lookahead so overlapping candidates are all visited; a rejected
# birth year does not hide a genuine number starting at the next group.
_GROUPED_IDENTIFIER = re.compile(
    r"(?=(?<!\d)(\d{4})[\s.\-]+(\d{4})[\s.\-]+(\d{4})(?!\d))", _FLAGS
)
_CONSECUTIVE_IDENTIFIER = re.compile(r"\b(\d{12})\b", _FLAGS)
_DIGIT_RUN = re.compile(r"\d+", _FLAGS)
_TWELVE_DIGITS = re.compile(r"\d{12}", _FLAGS)


def _grouped_identifier(text: str) -> Optional[str]:
    for match in _GROUPED_IDENTIFIER.finditer(collapse_whitespace(text)):
        if match.group(1) in BIRTH_YEAR_DENYLIST:
            continue
        return "".join(match.groups())
    return None


def _consecutive_identifier(text: str) -> Optional[str]:
    match = _CONSECUTIVE_IDENTIFIER.search(re.sub(r"\s", "", text, flags=_FLAGS))
    return match.group(1) if match else None


def _concatenated_identifier(text: str) -> Optional[str]:
    joined = "".join(_DIGIT_RUN.findall(text))
    match = _TWELVE_DIGITS.search(joined)
    return match.group(0) if match else None


IDENTIFIER_STRATEGIES: tuple[Strategy, ...] = (
    _grouped_identifier,
    _consecutive_identifier,
    _concatenated_identifier,
)


def extract_identifier(text: str) -> Optional[str]:
    """Return the Aadhaar number formatted as ``#### #### ####``."""

    digits = run_cascade(IDENTIFIER_STRATEGIES, text)
    return _format_identifier(digits) if digits is not None else None


# ---------------------------------------------------------------------------
# Date of birth
# ---------------------------------------------------------------------------

_SEP = r"[/\-.]"
_DMY = rf"\d{{2}}{_SEP}\d{{2}}{_SEP}\d{{4}}"


def _pattern_strategy(pattern: Pattern[str], *, normalise: bool = True) -> Strategy:
    """Build a strategy returning the first capture group of ``pattern``."""

    def strategy(text: str) -> Optional[str]:
        match = pattern.search(join_lines(text))
        if match is None:
            return None
        value = match.group(1)
        return re.sub(r"[\-.]", "/", value) if normalise else value

    return strategy


DATE_OF_BIRTH_STRATEGIES: tuple[Strategy, ...] = (
    # ISO style dates keep the separators they were printed with.
    _pattern_strategy(
        re.compile(rf"(\d{{4}}{_SEP}\d{{2}}{_SEP}\d{{2}})", _FLAGS), normalise=False
    ),
    _pattern_strategy(re.compile(rf"DOB\s*[:\-/]?\s*({_DMY})", _IFLAGS)),
    _pattern_strategy(re.compile(rf"Date\s*of\s*Birth\s*[:\-]?\s*({_DMY})", _IFLAGS)),
    _pattern_strategy(re.compile(rf"D[O0]B\s*[:\-/]?\s*({_DMY})", _IFLAGS)),
    _pattern_strategy(re.compile(rf"Birth\s*[:\-]?\s*({_DMY})", _IFLAGS)),
    _pattern_strategy(re.compile(r"Year\s*of\s*Birth\s*[:\-]?\s*(\d{4})", _IFLAGS)),
    _pattern_strategy(re.compile(r"YOB\s*[:\-]?\s*(\d{4})", _IFLAGS)),
    _pattern_strategy(re.compile(r"DOB\s*[:\-]?\s*(\d{4})\b", _IFLAGS)),
    _pattern_strategy(re.compile(rf"\b({_DMY})\b", _FLAGS)),
    # Last resort: any year somewhere after a birth keyword.
    _pattern_strategy(re.compile(r"(?:Year|Birth|DOB)[^\d]*(\d{4})", _IFLAGS)),
)


def extract_date_of_birth(text: str) -> Optional[str]:
    return run_cascade(DATE_OF_BIRTH_STRATEGIES, text)


# ---------------------------------------------------------------------------
# Gender
# ---------------------------------------------------------------------------

_HINDI_MALE = "पुरुष"
_HINDI_FEMALE = "महिला"
_HINDI_WOMAN = "स्त्री"


def _when(pattern: Pattern[str], value: Gender) -> Strategy:
    def strategy(text: str) -> Optional[str]:
        return value if pattern.search(join_lines(text)) else None

    return strategy


def _gender_by_count(text: str) -> Optional[str]:
    upper = join_lines(text).upper()
    female_count = len(re.findall(r"FEMALE", upper))
    male_count = len(re.findall(r"\bMALE\b", upper, flags=_FLAGS))
    if female_count > 0:
        return "Female"
    if male_count > female_count:
        return "Male"
    return None


def _gender_from_hindi(text: str) -> Optional[str]:
    if _HINDI_MALE in text and not re.search(r"Female", text, flags=_IFLAGS):
        return "Male"
    if _HINDI_FEMALE in text or _HINDI_WOMAN in text:
        return "Female"
    return None


# Branch order matters on bilingual "Male/Female" template labels; do not merge.
GENDER_STRATEGIES: tuple[Strategy, ...] = (
    _when(re.compile(r"/\s*Female", _IFLAGS), "Female"),
    _when(re.compile(r"/\s*Male(?!\s*/)(?!Female)", _IFLAGS), "Male"),
    _when(re.compile(rf"{_HINDI_MALE}\s*/?\s*Female", _IFLAGS), "Female"),
    _when(re.compile(rf"{_HINDI_FEMALE}\s*/?\s*Male", _IFLAGS), "Male"),
    _when(re.compile(r"\bFEMALE\b", _IFLAGS), "Female"),
    _gender_by_count,
    _gender_from_hindi,
)


def extract_gender(text: str) -> Optional[Gender]:
    return cast(Optional[Gender], run_cascade(GENDER_STRATEGIES, text))


# ---------------------------------------------------------------------------
# Name
# ---------------------------------------------------------------------------

# A label is followed by a name of 3 to 30 letters and spaces.
_NAME_CAPTURE = r"([A-Za-z][A-Za-z\s]{2,29})"

NAME_LABEL_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(rf"Name\s*[:\-]\s*{_NAME_CAPTURE}", _IFLAGS),
    re.compile(rf"नाम\s*[/\s]*Name\s*[:\-]?\s*{_NAME_CAPTURE}", _IFLAGS),
    re.compile(rf"नाम\s*[:\-/]\s*{_NAME_CAPTURE}", _IFLAGS),
)

# OCR often glues these onto the surname, so they cut mid-word too.
_TRAILING_NOISE = re.compile(r"\s*(?:DOB|जन्म|Gender|Male|Female|पुरुष|महिला).*$", _IFLAGS)
_ORGANISATION_TERMS = re.compile(r"government|india|aadhaar|unique", _IFLAGS)
_ALPHA_WORD = re.compile(r"[A-Za-z]+", _FLAGS)

NAME_LINE_EXCLUSIONS: tuple[Pattern[str], ...] = tuple(
    re.compile(pattern, _IFLAGS)
    for pattern in (
        r"government",
        r"india",
        r"aadhaar",
        r"unique",
        r"identification",
        r"authority",
        r"\bmale\b",
        r"\bfemale\b",
        r"dob",
        r"address",
        r"download",
        r"year|birth|issue",
        r"\d",
        r"^oo\s",
        r"^qc\s",
        r"भारत",
        r"सरकार",
        r"आधार",
        r"पहचान",
        r"आम\s*आदमी",
        r"अधिकार",
    )
)


def _is_alpha_word(word: str) -> bool:
    return _ALPHA_WORD.fullmatch(word) is not None


def _labelled_name(text: str) -> Optional[str]:
    full_text = join_lines(text)
    for pattern in NAME_LABEL_PATTERNS:
        match = pattern.search(full_text)
        if match is None:
            continue

        name = _TRAILING_NOISE.sub("", match.group(1).strip()).strip()
        if len(name) <= 2 or _ORGANISATION_TERMS.search(name):
            continue

        words = [word for word in name.split() if len(word) >= 2 and _is_alpha_word(word)]
        if 1 <= len(words) <= 4:
            return title_case(" ".join(words))
    return None


def _standalone_name_line(text: str) -> Optional[str]:
    lines = [line.strip() for line in text.split("\n")]
    for line in lines:
        if len(line) <= 2:
            continue
        if any(pattern.search(line) for pattern in NAME_LINE_EXCLUSIONS):
            continue

        clean_line = re.sub(r"[^A-Za-z\s]", "", line).strip()
        words = [word for word in clean_line.split() if len(word) >= 2]
        if 2 <= len(words) <= 4 and all(_is_alpha_word(word) for word in words):
            return title_case(" ".join(words))
    return None


NAME_STRATEGIES: tuple[Strategy, ...] = (_labelled_name, _standalone_name_line)


def extract_name(text: str) -> Optional[str]:
    return run_cascade(NAME_STRATEGIES, text)
