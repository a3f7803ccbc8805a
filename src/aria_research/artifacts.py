"""Strip markdown/formatting noise from model-generated text fragments."""

from __future__ import annotations

import re

_MARKUP_RE = re.compile(r"[*#_~]")
_BRACKETS_RE = re.compile(r"[\[\]]")
# "Signal Vector 3" must go before the bare "Vector 3" form
_ENUMERATOR_RES = (
    re.compile(r"Signal\s+Vector\s+\d+", re.IGNORECASE),
    re.compile(r"Vector\s+\d+", re.IGNORECASE),
)
_WHITESPACE_RE = re.compile(r"\s+")


def strip_artifacts(text: str | None) -> str:
    """Remove markup punctuation, brackets and "Vector N" enumerators; collapse whitespace.

    Total and idempotent: strip_artifacts(strip_artifacts(x)) == strip_artifacts(x).
    """
    if not text:
        return ""
    cleaned = _BRACKETS_RE.sub("", _MARKUP_RE.sub("", text))

    # Removing one enumerator can splice a new one together ("VecVector 1tor 2")
    previous = None
    while previous != cleaned:
        previous = cleaned
        for pattern in _ENUMERATOR_RES:
            cleaned = pattern.sub("", cleaned)

    return _WHITESPACE_RE.sub(" ", cleaned).strip()
