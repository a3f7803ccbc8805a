"""Research flow: prompt -> Gemini -> parse -> archive."""

from __future__ import annotations

import structlog

from aria_research.db.repository import SimulationRepository
from aria_research.gemini_client import GeminiClient
from aria_research.models.research import DecisionType, ResearchResult
from aria_research.prompt_builder import PromptBuilder
from aria_research.response_parser import ResponseParser

logger = structlog.get_logger()


class ResearchService:
    def __init__(
        self,
        client: GeminiClient,
        parser: ResponseParser | None = None,
        archive: SimulationRepository | None = None,
        prompts: PromptBuilder | None = None,
    ) -> None:
        self.client = client
        self.parser = parser or ResponseParser()
        self.archive = archive
        self.prompts = prompts or PromptBuilder()

    async def research(self, decision: str, tags: list[DecisionType]) -> ResearchResult:
        """Run one grounded research and return the parsed result."""
        prompt = self.prompts.build_research_prompt(decision, tags)
        raw = await self.client.generate_research(prompt)
        result = self.parser.parse(raw, decision, tags)

        if self.archive is not None:
            await self._archive(result)
        return result

    async def refine(self, draft: str) -> list[str]:
        """Suggest clearer rewordings of a draft decision."""
        if not draft.strip():
            return []
        return await self.client.refine(self.prompts.build_refine_prompt(draft))

    async def _archive(self, result: ResearchResult) -> None:
        try:
            await self.archive.save(result)
        except Exception as e:
            logger.warning("archive_save_failed", simulation_id=result.id, error=str(e))
