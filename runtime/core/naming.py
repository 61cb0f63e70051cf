"""Normalization of arbitrary text into resource name / label value components.

Label values must be at most 63 characters, drawn from [a-z0-9.-] here, and
must begin and end with an alphanumeric character.
"""

from __future__ import annotations

MAX_VALUE_LENGTH = 63
PLACEHOLDER_VALUE = "unnamed"


def to_valid_value(raw: str) -> str:
    """Convert `raw` into a valid label value.

    Lowercases ASCII letters, keeps digits and dots, and collapses every other
    run of characters into a single dash. Never fails: input with nothing
    usable maps to PLACEHOLDER_VALUE.
    """
    out: list[str] = []
    pending_dash = False
    for ch in raw or "":
        if ch.isascii() and (ch.isalnum() or ch == "."):
            if pending_dash and out:
                out.append("-")
            pending_dash = False
            if ch == "." and not out:
                continue
            out.append(ch.lower())
        else:
            pending_dash = True

    value = "".join(out)[:MAX_VALUE_LENGTH].rstrip("-.")
    return value or PLACEHOLDER_VALUE


def trim_length(text: str, length: int) -> str:
    """Return the leading `length` characters of text (never pads)."""
    if length <= 0:
        return ""
    return text[:length]
