"""
LLM client for business problem analysis.
Uses LangChain's ChatOpenAI with structured output.

Two analysis modes:
- deep analysis: diagnosis plus short-term and long-term solutions
- search: a direct answer citing the web sources it relies on

This is the boundary where untagged model output becomes a tagged result.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from config import get_settings
from knowledge.models import (
    AnalysisResult,
    BusinessArea,
    GroundedAnswer,
    tag_result_payload,
)

logger = logging.getLogger(__name__)

# Cache of solver clients by model name
_clients: Dict[str, "SolverClient"] = {}


# Output schemas the model fills in. They mirror the result shapes minus the tag.

class _StepOut(BaseModel):
    title: str = Field(description="Short name of the step")
    description: str = Field(description="What to do and how")


class _SolutionOut(BaseModel):
    title: str
    summary: str
    steps: List[_StepOut] = Field(description="3-5 ordered, actionable steps")
    isPremium: bool = Field(default=False, description="True if it needs paid tools or outside consultants")


class _ProblemAnalysisOut(BaseModel):
    identifiedProblem: str = Field(description="Root cause behind the described symptoms")
    impact: str = Field(description="Business impact if left unsolved")


class AnalysisOut(BaseModel):
    """Structured analysis of a business problem."""
    problemAnalysis: _ProblemAnalysisOut
    shortTermSolution: _SolutionOut
    longTermSolution: _SolutionOut


class _SourceOut(BaseModel):
    title: Optional[str] = None
    uri: str


class GroundedOut(BaseModel):
    """Answer to a business problem with cited sources."""
    answer: str
    sources: List[_SourceOut] = Field(default_factory=list)


ANALYSIS_SYSTEM = """You are a senior business consultant for small and medium companies.
The client works in the "{area}" area.

Diagnose the root problem behind what they describe, state its business impact,
then propose a short-term solution (results within weeks) and a long-term solution
(structural change over months). Each solution needs a title, a one-paragraph summary
and concrete ordered steps. Mark a solution as premium only if it requires paid
tools or outside specialists."""

SEARCH_SYSTEM = """You are a business research assistant.
The client works in the "{area}" area.

Answer their problem with current, practical recommendations. Cite the web pages
your answer relies on as sources with their URL and, when known, their title.
Never invent URLs."""


def to_result(payload: Dict[str, Any]) -> Union[AnalysisResult, GroundedAnswer]:
    """Map raw model output onto the tagged result union."""
    tagged = tag_result_payload(payload)
    if tagged["kind"] == "grounded":
        return GroundedAnswer.model_validate(tagged)
    return AnalysisResult.model_validate(tagged)


class SolverClient:
    """Async LLM client that turns problem descriptions into results."""

    def __init__(self, model: Optional[str] = None):
        """
        Initialize solver client.

        Args:
            model: Model name (e.g., "gpt-4o"). If None, uses the
                   OPENAI_MODEL setting (default "gpt-4o-mini").
        """
        settings = get_settings()
        model = model or settings.openai_model
        self._llm = ChatOpenAI(
            model=model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
        self.model_name = model

    async def analyze_problem(self, description: str, area: BusinessArea) -> AnalysisResult:
        """Deep analysis with short-term and long-term solutions."""
        payload = await self._structured(AnalysisOut, ANALYSIS_SYSTEM, description, area)
        return to_result(payload)

    async def analyze_with_search(self, description: str, area: BusinessArea) -> GroundedAnswer:
        """Direct answer with cited web sources."""
        payload = await self._structured(GroundedOut, SEARCH_SYSTEM, description, area)
        return to_result(payload)

    async def _structured(
        self,
        schema: type,
        system: str,
        description: str,
        area: BusinessArea,
    ) -> Dict[str, Any]:
        logger.info("Requesting %s from %s", schema.__name__, self.model_name)
        runnable = self._llm.with_structured_output(schema)
        response = await runnable.ainvoke(
            [
                {"role": "system", "content": system.format(area=area.label)},
                {"role": "user", "content": description},
            ]
        )
        return response.model_dump(exclude_none=True)


def get_solver_client(model: Optional[str] = None) -> SolverClient:
    """
    Get or create a solver client for the specified model.

    Returns:
        SolverClient instance (cached per model).
    """
    model = model or get_settings().openai_model
    if model not in _clients:
        _clients[model] = SolverClient(model=model)
    return _clients[model]
