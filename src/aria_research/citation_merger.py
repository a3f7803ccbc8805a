"""
Merge search-grounding references and free-text citations into one URL-keyed list.

Grounding references come first, then URLs scanned from the CITATIONS
section in text order. The first entry seen for an exact URL string wins.
Markdown links (``[title](url)``) keep their title; bare URLs get a
placeholder. URLs that fail basic parsing are skipped.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import structlog

from aria_research.artifacts import strip_artifacts
from aria_research.models.research import Citation, GroundingRef

logger = structlog.get_logger()

MAX_CITATIONS = 32
GROUNDING_TITLE_PLACEHOLDER = "Research Source"
FREE_TEXT_TITLE_PLACEHOLDER = "Source Data"
FREE_TEXT_SOURCE = "EXTERNAL RESEARCH"

# Attribution the search tool appends to page titles
_TITLE_SUFFIX_RE = re.compile(r"\s*-\s*(?:Google Search|Vertex ?AI)\s*", re.IGNORECASE)
# URLs may carry one level of balanced parentheses, e.g. wiki/Foo_(bar)
_LINK_OR_URL_RE = re.compile(
    r"\[([^\[\]]*)\]\((https?://(?:[^\s()]|\([^\s()]*\))+)\)"  # [title](url)
    r"|(https?://(?:[^\s<>()\[\]\"']|\([^\s<>()\[\]\"']*\))+)",  # bare url
    re.IGNORECASE,
)
_URL_TRAILING_PUNCT = ".,;:!?"


def host_source(url: str) -> str | None:
    """Uppercased host without a leading "www.", or None when the URL is malformed."""
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not host:
        return None
    if host.startswith("www."):
        host = host[len("www."):]
    return host.upper()


def clean_title(title: str | None) -> str:
    return _TITLE_SUFFIX_RE.sub(" ", strip_artifacts(title)).strip()


class _CitationMap:
    """Insertion-ordered, bounded, first-seen-wins map of url -> Citation."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.entries: dict[str, Citation] = {}

    @property
    def full(self) -> bool:
        return len(self.entries) >= self.limit

    def add(self, url: str, title: str, source: str) -> None:
        if url in self.entries or self.full:
            return
        self.entries[url] = Citation(title=title, url=url, source=source)


def _scan_free_text(text: str) -> list[tuple[str, str | None]]:
    """Return (url, title or None) pairs in the order they appear."""
    found = []
    for match in _LINK_OR_URL_RE.finditer(text):
        if match.group(2):
            found.append((match.group(2), match.group(1)))
        else:
            found.append((match.group(3).rstrip(_URL_TRAILING_PUNCT), None))
    return found


def merge_citations(
    grounding_refs: list[GroundingRef] | None,
    free_text: str | None,
    limit: int = MAX_CITATIONS,
) -> list[Citation]:
    citations = _CitationMap(limit)

    for ref in grounding_refs or []:
        if citations.full:
            break
        url = (ref.uri or "").strip()
        if not url:
            continue
        source = host_source(url)
        if source is None:
            logger.debug("citation_skipped", url=url[:200], reason="malformed_url")
            continue
        if ref.source and ref.source.strip():
            source = ref.source.strip().removeprefix("www.").upper()
        citations.add(url, clean_title(ref.title) or GROUNDING_TITLE_PLACEHOLDER, source)

    for url, title in _scan_free_text(free_text or ""):
        if citations.full:
            break
        if host_source(url) is None:
            logger.debug("citation_skipped", url=url[:200], reason="malformed_url")
            continue
        citations.add(url, clean_title(title) or FREE_TEXT_TITLE_PLACEHOLDER, FREE_TEXT_SOURCE)

    return list(citations.entries.values())
