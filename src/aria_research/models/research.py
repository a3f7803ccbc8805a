"""Research pipeline Pydantic models: raw model output in, ResearchResult out."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DecisionType = Literal["Personal", "Career", "Business", "Investment", "Lifestyle"]


class SectionName(str, Enum):
    SYNTHESIS = "SYNTHESIS"
    MAIN_SIMULATION = "MAIN_SIMULATION"
    POLLS = "POLLS"
    ACTION_PLAN = "ACTION_PLAN"
    CITATIONS = "CITATIONS"


class GroundingRef(BaseModel):
    """Search-grounding source attached to the model response."""

    model_config = ConfigDict(frozen=True)

    uri: str = ""
    title: str | None = None
    source: str | None = None  # explicit domain metadata, when the service sends it


class RawResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    grounding_refs: list[GroundingRef] = []


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    percentage: int = Field(ge=0, le=100)


class PollQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question: str = ""
    options: list[Option] = Field(min_length=1, max_length=6)
    context: str = ""
    display_group: int = Field(default=0, ge=0)


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    source: str


class ResearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
    decision: str = ""
    tags: list[DecisionType] = []
    analysis: str = ""
    polls: list[PollQuestion] = Field(default=[], max_length=9)
    main_simulation: list[Option] = []
    citations: list[Citation] = Field(default=[], max_length=32)
    action_plan: list[str] = []
