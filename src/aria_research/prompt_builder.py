"""Build prompts for the Gemini research and refine calls."""

from __future__ import annotations

from aria_research.models.research import DecisionType

RESEARCH_RULES = """STRICT RULES:
1. SIMPLE ENGLISH: Use plain, easy-to-understand language. No jargon.
2. NO ARTIFACTS: Never use asterisks, hashes or square brackets.
3. NO LABELS: Never use "Label A", "Option 1" and the like. Use natural names such as "Buy Now" or "Wait for a Dip".
4. STRUCTURE: Follow the section headers exactly."""

OUTPUT_STRUCTURE = """OUTPUT STRUCTURE (STRICT):
---DATA_SYNTHESIS---
Topic: Brief description
(Provide exactly 4 distinct signal lines)

---MAIN_SIMULATION---
Success Probability: 70%, Failure Risk: 30%

---EMPIRICAL_POLLS---
Provide exactly {poll_count} polls. Use this format:
POLL_START
QUESTION: Simple scenario question
OPTIONS: Natural Choice One: 60%, Natural Choice Two: 40%
CONTEXT: Grounding evidence in simple terms.
POLL_END

---ACTION_PLAN---
1. Clear action
2. Clear action
(4-5 clear steps)

---CITATIONS---
List the URLs you consulted."""


class PromptBuilder:
    def __init__(self, poll_count: int = 9) -> None:
        self.poll_count = poll_count

    def build_research_prompt(self, decision: str, tags: list[DecisionType]) -> str:
        """Sectioned research prompt whose headers the section splitter recognizes."""
        parts = [
            "Act as a Lead Decision Architect.",
            f'DECISION: "{decision.strip()}"',
            f"DOMAINS: {', '.join(tags) if tags else 'General'}",
            "",
            f"GOAL: Generate a research report with {self.poll_count} poll simulations using simple English.",
            "",
            RESEARCH_RULES,
            "",
            OUTPUT_STRUCTURE.format(poll_count=self.poll_count),
        ]
        return "\n".join(parts)

    def build_refine_prompt(self, draft: str, alternatives: int = 3) -> str:
        return (
            f'Rewrite this decision to be clearer and simpler: "{draft.strip()}". '
            f"Provide {alternatives} distinct simple alternatives. Use plain English. "
            "No brackets, no markdown. Return ONLY a JSON array of strings."
        )
