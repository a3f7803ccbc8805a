"""
Recover labeled percentage options from loosely formatted model text.

Two pure strategies composed with a guard: the greedy pass splits the
fragment on delimiters, and only when it accepts nothing does the fallback
scan the whole fragment for "label ... NN%" pairs embedded in prose.
Emission order is source order of first occurrence.
"""

from __future__ import annotations

import math
import re

from aria_research.artifacts import strip_artifacts
from aria_research.models.research import Option

MAX_GREEDY_OPTIONS = 6

_PERCENT_RE = re.compile(r"(\d+)\s*%")
_GREEDY_SPLIT_RE = re.compile(r"[,;|]|(?=\d+\s*%)")
_FALLBACK_PAIR_RE = re.compile(r"([^:|%]+?)[:\s\-]*(\d+)\s*%")
_EDGE_PUNCT_RE = re.compile(r"^[:;\s\-|,]+|[:;\s\-|,]+$")
# Synthetic identifiers such as "Option A:" or "Scenario 2 -"
_GENERIC_PREFIX_RE = re.compile(
    r"^(?:Option|Choice|Scenario|Label)\s+(?:[A-Z]|\d+)\b[:\s\-]*", re.IGNORECASE
)


def clean_label(raw: str) -> str:
    """Strip artifacts, separator punctuation and generic "Option X" prefixes."""
    label = _EDGE_PUNCT_RE.sub("", strip_artifacts(raw))
    return _GENERIC_PREFIX_RE.sub("", label).strip()


def _parse_percentage(digits: str) -> int | None:
    """Integer value of a percentage token, clamped to 100."""
    try:
        value = int(digits)
    except ValueError:
        return None
    return min(value, 100)


def _accept(options: list[Option], seen: set[str], raw_label: str, digits: str) -> None:
    label = clean_label(raw_label)
    if not label or label.lower() in seen:
        return
    percentage = _parse_percentage(digits)
    if percentage is None:
        return
    options.append(Option(label=label, percentage=percentage))
    seen.add(label.lower())


def extract_greedy(text: str) -> list[Option]:
    """Split on , ; | and before percentage tokens; take the text ahead of each % as its label."""
    options: list[Option] = []
    seen: set[str] = set()
    chunks = _GREEDY_SPLIT_RE.split(text.replace("\n", " | "))

    for chunk in chunks:
        if not chunk.strip():
            continue
        match = _PERCENT_RE.search(chunk)
        if match:
            _accept(options, seen, chunk[: match.start()], match.group(1))
        if len(options) >= MAX_GREEDY_OPTIONS:
            break
    return options


def extract_fallback(text: str) -> list[Option]:
    """Scan free prose for repeated "label [sep] NN%" pairs until matches run out."""
    options: list[Option] = []
    seen: set[str] = set()
    for match in _FALLBACK_PAIR_RE.finditer(text):
        _accept(options, seen, match.group(1), match.group(2))
    return options


def extract_options(text: str | None) -> list[Option]:
    """Best-effort option recovery; never raises, returns [] when nothing parses."""
    if not text:
        return []
    return extract_greedy(text) or extract_fallback(text)


# =============================================================================
# Percentage normalization
# =============================================================================


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_percentages(options: list[Option]) -> list[Option]:
    """Rescale percentages to integers summing to exactly 100.

    Every option keeps at least 1%. The rounding drift is applied in full to
    the largest entry (first one on ties), floored at 0. Empty lists and
    all-zero lists are returned unchanged.
    """
    if not options:
        return options
    total = sum(option.percentage for option in options)
    if total == 0:
        return options

    values = [max(1, _round_half_up(option.percentage / total * 100)) for option in options]
    drift = 100 - sum(values)
    if drift != 0:
        largest = values.index(max(values))
        values[largest] = max(0, values[largest] + drift)

    return [
        option.model_copy(update={"percentage": value})
        for option, value in zip(options, values)
    ]
