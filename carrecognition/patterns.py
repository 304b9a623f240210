"""
License plate text validation.

Plates are checked against a small set of simplified US formats after
removing spaces and upper-casing the text.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import TextCandidate

PLATE_PATTERNS = (
    re.compile(r"[A-Z0-9]{6,8}"),  # generic 6-8 alphanumeric
    re.compile(r"[A-Z]{1,3}[0-9]{3,4}"),  # 1-3 letters followed by 3-4 digits
    re.compile(r"[0-9]{3}[A-Z]{3}"),  # 3 digits followed by 3 letters
)


def clean_plate_text(text: str) -> str:
    """Remove spaces and upper-case the text."""
    return text.replace(" ", "").upper()


def is_license_plate_like(text: str) -> bool:
    """Return ``True`` when ``text`` matches one of the plate formats."""
    if not text:
        return False
    candidate = clean_plate_text(text)
    return any(pattern.fullmatch(candidate) for pattern in PLATE_PATTERNS)


def first_license_plate(candidates: Iterable[TextCandidate]) -> Optional[str]:
    """
    Return the text of the first candidate that looks like a plate.

    Candidates are examined in the order the recognizer returned them and the
    winning text is returned exactly as it was recognized.
    """
    for candidate in candidates:
        if is_license_plate_like(candidate.text):
            return candidate.text
    return None
