"""
Record model for the solution knowledge base.

A SolutionRecord ties one submitted business problem to the AI result it
produced. The result is a tagged union on `kind`:

- "analysis": structured diagnosis plus short-term and long-term solutions
- "grounded": free-form answer with the web sources it was built from

Wire format uses camelCase field names (companyType, isPremium, ...) so the
persisted knowledge base and the JSON export stay the same document.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated


class BusinessArea(str, Enum):
    """Business area a problem belongs to."""
    MARKETING = "marketing"
    SALES = "sales"
    LOGISTICS = "logistics"
    HR = "hr"
    FINANCE = "finance"
    IT = "it"
    GENERAL = "general"

    @property
    def label(self) -> str:
        return AREA_LABELS.get(self, AREA_LABELS[BusinessArea.GENERAL])


AREA_LABELS: Dict[BusinessArea, str] = {
    BusinessArea.MARKETING: "Marketing",
    BusinessArea.SALES: "Sales",
    BusinessArea.LOGISTICS: "Logistics",
    BusinessArea.HR: "Human Resources",
    BusinessArea.FINANCE: "Finance",
    BusinessArea.IT: "IT",
    BusinessArea.GENERAL: "General",
}


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SolutionStep(_WireModel):
    """One numbered step of a solution."""
    title: str
    description: str


class Solution(_WireModel):
    """A solution for one time horizon."""
    title: str
    summary: str
    steps: List[SolutionStep] = Field(default_factory=list)
    is_premium: Optional[bool] = None


class ProblemAnalysis(_WireModel):
    identified_problem: str
    impact: str


class AnalysisResult(_WireModel):
    """Structured multi-horizon analysis."""
    kind: Literal["analysis"] = "analysis"
    problem_analysis: ProblemAnalysis
    short_term_solution: Solution
    long_term_solution: Solution


class Source(_WireModel):
    title: Optional[str] = None
    uri: str


class GroundedAnswer(_WireModel):
    """Free-form answer grounded on web sources."""
    kind: Literal["grounded"] = "grounded"
    answer: str
    sources: List[Source] = Field(default_factory=list)


Result = Annotated[Union[AnalysisResult, GroundedAnswer], Field(discriminator="kind")]


def tag_result_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Assign the `kind` tag to an untagged result payload.

    Producers emit either shape without a tag. A payload carrying an
    `answer` field is a grounded answer, even when analysis fields are
    present too; anything else is an analysis. Tagged payloads are
    returned unchanged.
    """
    if "kind" in payload:
        return payload
    kind = "grounded" if "answer" in payload else "analysis"
    return {**payload, "kind": kind}


class NewSolution(_WireModel):
    """Everything the producer supplies for a record; id and timestamp are assigned by the store."""
    company_type: str
    niche: str
    problem_description: str
    business_area: BusinessArea = BusinessArea.GENERAL
    result: Result

    @field_validator("result", mode="before")
    @classmethod
    def _tag_result(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return tag_result_payload(value)
        return value


class SolutionRecord(_WireModel):
    """A persisted knowledge-base entry."""
    id: str
    timestamp: str
    company_type: str
    niche: str
    problem_description: str
    business_area: BusinessArea
    result: Result

    @field_validator("result", mode="before")
    @classmethod
    def _tag_result(cls, value: Any) -> Any:
        # Blobs written before results carried a tag.
        if isinstance(value, dict):
            return tag_result_payload(value)
        return value

    @classmethod
    def from_new(cls, new: NewSolution, record_id: str, timestamp: str) -> "SolutionRecord":
        return cls(
            id=record_id,
            timestamp=timestamp,
            company_type=new.company_type,
            niche=new.niche,
            problem_description=new.problem_description,
            business_area=new.business_area,
            result=new.result,
        )


def result_type_name(result: Union[AnalysisResult, GroundedAnswer]) -> str:
    """Human-facing variant name used in tabular exports."""
    if isinstance(result, GroundedAnswer):
        return "GroundedAnswer"
    return "AnalysisResult"
