"""
Split one block of model output into the named research sections.

The research prompt asks for fenced headers, but models drift between
styles, so both forms are recognized:

    ---DATA_SYNTHESIS---            fenced marker (text may follow on the line)
    ## Empirical Polls              leading-hash marker

Each line is classified once as a known header, an unknown header, or body
text, and body text is appended to whichever section the most recent header
opened. Text before the first header and text under an unknown header is
dropped. Text following a fenced marker on the same line is scanned for
further fenced markers, so a response collapsed onto one line still splits.

Usage:
    from aria_research.section_splitter import split_sections

    sections = split_sections(raw_text)
    polls_text = sections[SectionName.POLLS]   # "" when absent
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from aria_research.models.research import SectionName

# =============================================================================
# Header recognition
# =============================================================================

SECTION_ALIASES: dict[str, SectionName] = {
    "DATA_SYNTHESIS": SectionName.SYNTHESIS,
    "SYNTHESIS": SectionName.SYNTHESIS,
    "MAIN_SIMULATION": SectionName.MAIN_SIMULATION,
    "EMPIRICAL_POLLS": SectionName.POLLS,
    "POLLS": SectionName.POLLS,
    "ACTION_PLAN": SectionName.ACTION_PLAN,
    "CITATIONS": SectionName.CITATIONS,
}

_FENCED_HEADER_RE = re.compile(r"^\s*-{3,}\s*([A-Za-z][A-Za-z _]*?)\s*-{3,}(.*)$")
_INLINE_FENCE_RE = re.compile(r"-{3,}\s*([A-Za-z][A-Za-z _]*?)\s*-{3,}")
_HASH_HEADER_RE = re.compile(r"^\s*#{1,6}\s*([A-Za-z][A-Za-z _]*?)\s*:?\s*$")


@dataclass(frozen=True)
class _Header:
    section: SectionName | None  # None for headers outside the known set
    remainder: str = ""


def _normalize_header_name(name: str) -> str:
    return re.sub(r"[\s_]+", "_", name.strip()).upper()


def _classify_line(line: str) -> _Header | None:
    """Return the header a line opens, or None for body text."""
    match = _FENCED_HEADER_RE.match(line)
    if match:
        section = SECTION_ALIASES.get(_normalize_header_name(match.group(1)))
        return _Header(section=section, remainder=match.group(2).strip())

    match = _HASH_HEADER_RE.match(line)
    if match:
        return _Header(section=SECTION_ALIASES.get(_normalize_header_name(match.group(1))))

    return None


# =============================================================================
# Splitting
# =============================================================================


def split_sections(text: str | None) -> dict[SectionName, str]:
    """Partition raw model text into sections keyed by SectionName.

    Every SectionName is present in the result; absent sections map to "".
    A section header that appears twice accumulates both spans.
    """
    accumulator: dict[SectionName, list[str]] = {name: [] for name in SectionName}
    current: SectionName | None = None

    for line in (text or "").splitlines():
        header = _classify_line(line)
        if header is None:
            if current is not None:
                accumulator[current].append(line)
            continue

        current = header.section
        remainder = header.remainder
        while True:
            # a fenced line may pack several markers: ---A--- text ---B--- text
            inline = _INLINE_FENCE_RE.search(remainder)
            head = remainder[:inline.start()] if inline else remainder
            if current is not None and head.strip():
                accumulator[current].append(head.strip())
            if inline is None:
                break
            current = SECTION_ALIASES.get(_normalize_header_name(inline.group(1)))
            remainder = remainder[inline.end():]

    return {name: "\n".join(lines).strip() for name, lines in accumulator.items()}
