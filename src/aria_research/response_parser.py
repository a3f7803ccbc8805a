"""Turn a RawResponse into a ResearchResult."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import get_args

import structlog

from aria_research.artifacts import strip_artifacts
from aria_research.citation_merger import merge_citations
from aria_research.models.research import (
    DecisionType,
    RawResponse,
    ResearchResult,
    SectionName,
)
from aria_research.option_extractor import extract_options, normalize_percentages
from aria_research.poll_assembler import assemble_polls
from aria_research.section_splitter import split_sections

logger = structlog.get_logger()

MIN_LINE_CHARS = 5
_STEP_NUMBER_RE = re.compile(r"^\d+\.\s*")


def epoch_millis_token() -> str:
    return str(time.time_ns() // 1_000_000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _meaningful_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if len(line.strip()) > MIN_LINE_CHARS]


def clean_analysis(text: str) -> str:
    return "\n".join(strip_artifacts(line) for line in _meaningful_lines(text))


def known_tags(tags: list[str] | None) -> list[DecisionType]:
    """Keep the tags that name a DecisionType; drop the rest with a debug event."""
    allowed = get_args(DecisionType)
    kept = [tag for tag in tags or [] if tag in allowed]
    dropped = [tag for tag in tags or [] if tag not in allowed]
    if dropped:
        logger.debug("unknown_tags_dropped", tags=dropped)
    return kept


def clean_action_plan(text: str) -> list[str]:
    steps = []
    for line in _meaningful_lines(text):
        step = _STEP_NUMBER_RE.sub("", strip_artifacts(line)).strip()
        if step:
            steps.append(step)
    return steps


class ResponseParser:
    """Run the extraction pipeline over one model response.

    ``token_factory`` supplies the freshness token used in result and poll ids,
    ``clock`` the creation timestamp; inject both to get deterministic output.
    """

    def __init__(
        self,
        token_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.token_factory = token_factory or epoch_millis_token
        self.clock = clock or utc_now

    def parse(
        self,
        raw: RawResponse,
        decision: str,
        tags: list[str] | None = None,
    ) -> ResearchResult:
        token = self.token_factory()
        sections = split_sections(raw.text)

        result = ResearchResult(
            id=f"sim-{token}",
            created_at=self.clock(),
            decision=strip_artifacts(decision),
            tags=known_tags(tags),
            analysis=clean_analysis(sections[SectionName.SYNTHESIS]),
            polls=assemble_polls(sections[SectionName.POLLS], freshness=token),
            main_simulation=normalize_percentages(
                extract_options(sections[SectionName.MAIN_SIMULATION])
            ),
            citations=merge_citations(raw.grounding_refs, sections[SectionName.CITATIONS]),
            action_plan=clean_action_plan(sections[SectionName.ACTION_PLAN]),
        )
        logger.info(
            "research_parsed",
            result_id=result.id,
            polls=len(result.polls),
            citations=len(result.citations),
            main_options=len(result.main_simulation),
            action_steps=len(result.action_plan),
        )
        return result
