"""
Knowledge base for the business problem solver.

Holds every AI analysis a user has generated so it can be browsed and
exported later.

Features:
- Record model with a tagged result variant (analysis / grounded answer)
- Newest-first store persisted as one JSON document (knowledge.storage)
- Selection of records for partial export
- Built-in seed data for a fresh install
"""

from .models import (
    AnalysisResult,
    BusinessArea,
    GroundedAnswer,
    NewSolution,
    ProblemAnalysis,
    Solution,
    SolutionRecord,
    SolutionStep,
    Source,
    tag_result_payload,
)
from .seed import EXAMPLE_PROBLEMS, SEED_RECORDS
from .selection import SelectionTracker

__all__ = [
    "AnalysisResult",
    "BusinessArea",
    "GroundedAnswer",
    "NewSolution",
    "ProblemAnalysis",
    "Solution",
    "SolutionRecord",
    "SolutionStep",
    "Source",
    "tag_result_payload",
    "EXAMPLE_PROBLEMS",
    "SEED_RECORDS",
    "SelectionTracker",
]
