"""Build PollQuestion records from the POLL_START ... POLL_END blocks of the polls section."""

from __future__ import annotations

import re

import structlog

from aria_research.artifacts import strip_artifacts
from aria_research.models.research import PollQuestion
from aria_research.option_extractor import extract_options, normalize_percentages

logger = structlog.get_logger()

MAX_POLLS = 9
MAX_POLL_OPTIONS = 6
MIN_BLOCK_CHARS = 10
DEFAULT_CONTEXT = "Based on synthesized market sentiment."

# Presentation palette; polls carry an index into it, never the colour itself
DISPLAY_PALETTE = ("slate", "blue", "indigo", "purple", "emerald", "rose", "amber", "cyan")

_BLOCK_START_RE = re.compile(r"POLL_START", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"POLL_END", re.IGNORECASE)
_FIELD_MARKER_RE = re.compile(r"\b(QUESTION|OPTIONS|CONTEXT)\s*:", re.IGNORECASE)


def split_poll_blocks(section_text: str) -> list[str]:
    """Cut the section at each start marker and truncate every block at its end marker."""
    blocks = []
    for chunk in _BLOCK_START_RE.split(section_text):
        if len(chunk.strip()) <= MIN_BLOCK_CHARS:
            continue
        blocks.append(_BLOCK_END_RE.split(chunk, maxsplit=1)[0].strip())
    return blocks


def _at_line_start(block: str, index: int) -> bool:
    line_prefix = block[block.rfind("\n", 0, index) + 1:index]
    return not line_prefix.strip(" \t*#_-")


def parse_block_fields(block: str) -> dict[str, str]:
    """Map QUESTION/OPTIONS/CONTEXT to their text; each field runs to the next marker.

    A marker opening a line always counts. An inline marker counts only when
    no line in the block opens with that name, so "your options: ..." inside a
    question does not steal the OPTIONS field. Only the first counted
    occurrence of a name is kept.
    """
    found = list(_FIELD_MARKER_RE.finditer(block))
    anchored = {m.group(1).upper() for m in found if _at_line_start(block, m.start())}
    markers = [
        m for m in found
        if _at_line_start(block, m.start()) or m.group(1).upper() not in anchored
    ]

    fields: dict[str, str] = {}
    for position, marker in enumerate(markers):
        name = marker.group(1).upper()
        if name in fields:
            continue
        end = markers[position + 1].start() if position + 1 < len(markers) else len(block)
        fields[name] = block[marker.end():end].strip()
    return fields


def assemble_polls(section_text: str | None, freshness: str = "") -> list[PollQuestion]:
    """Turn the polls section into at most MAX_POLLS PollQuestions, in source order.

    Blocks without an OPTIONS field, or whose options yield nothing, are dropped.
    Ids are ``poll-<blockIndex>-<freshness>``; display groups cycle through
    DISPLAY_PALETTE by block index.
    """
    polls: list[PollQuestion] = []
    if not section_text:
        return polls

    for index, block in enumerate(split_poll_blocks(section_text)):
        if len(polls) >= MAX_POLLS:
            break

        fields = parse_block_fields(block)
        if "OPTIONS" not in fields:
            logger.debug("poll_block_dropped", block_index=index, reason="no_options_marker")
            continue

        options = extract_options(fields["OPTIONS"])[:MAX_POLL_OPTIONS]
        if not options:
            logger.debug("poll_block_dropped", block_index=index, reason="no_options_parsed")
            continue

        context = strip_artifacts(fields.get("CONTEXT")) or DEFAULT_CONTEXT
        polls.append(
            PollQuestion(
                id=f"poll-{index}-{freshness}" if freshness else f"poll-{index}",
                question=strip_artifacts(fields.get("QUESTION")),
                options=normalize_percentages(options),
                context=context,
                display_group=index % len(DISPLAY_PALETTE),
            )
        )
    return polls
