"""Whitespace helpers shared by the field extractors."""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Reduce every run of whitespace (newlines included) to a single space."""

    return _WHITESPACE_RUN.sub(" ", text)


def join_lines(text: str) -> str:
    """Replace each newline with a single space, leaving other spacing alone."""

    return text.replace("\n", " ")


def title_case(text: str) -> str:
    """Upper-case the first letter of every word and lower-case the rest."""

    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())
