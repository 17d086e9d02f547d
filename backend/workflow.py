"""
Solve workflow: problem description -> AI result -> knowledge base record.

Flow:
1. Analyze (deep analysis or web search, via the solver client)
2. Record (store the result as a new record, newest first)

A failed analysis sets `error` and nothing is recorded.
"""

import logging
from typing import Any, Optional

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from knowledge.models import BusinessArea, NewSolution, SolutionRecord
from knowledge.storage import SolutionStore

logger = logging.getLogger(__name__)

MODE_DEEP = "deep"
MODE_SEARCH = "search"


class SolveState(TypedDict):
    """State passed through the LangGraph workflow."""
    description: str
    company_type: str
    niche: str
    business_area: BusinessArea
    mode: str

    result: Optional[Any]
    record: Optional[SolutionRecord]

    error: Optional[str]


def initial_state(
    description: str,
    company_type: str,
    niche: str,
    business_area: BusinessArea = BusinessArea.GENERAL,
    mode: str = MODE_DEEP,
) -> SolveState:
    return {
        "description": description,
        "company_type": company_type,
        "niche": niche,
        "business_area": business_area,
        "mode": mode,
        "result": None,
        "record": None,
        "error": None,
    }


def build_solver_workflow(client: Any, store: SolutionStore):
    """
    Build the LangGraph workflow for solving a problem.

    Args:
        client: Object with async analyze_problem / analyze_with_search
        store: Knowledge base new records are appended to
    """

    async def analyze_node(state: SolveState) -> SolveState:
        """Node: run the AI analysis in the requested mode."""
        try:
            if state["mode"] == MODE_SEARCH:
                result = await client.analyze_with_search(state["description"], state["business_area"])
            else:
                result = await client.analyze_problem(state["description"], state["business_area"])
            state["result"] = result
        except Exception as e:
            logger.exception("Analysis failed")
            state["error"] = f"Analysis failed: {e}"
        return state

    async def record_node(state: SolveState) -> SolveState:
        """Node: store the result as a new knowledge base record."""
        if state.get("error") or state.get("result") is None:
            return state
        new = NewSolution(
            company_type=state["company_type"],
            niche=state["niche"],
            problem_description=state["description"],
            business_area=state["business_area"],
            result=state["result"],
        )
        state["record"] = store.add_solution(new)
        return state

    workflow = StateGraph(SolveState)

    workflow.add_node("analyze", analyze_node)
    workflow.add_node("record", record_node)

    workflow.set_entry_point("analyze")
    workflow.add_edge("analyze", "record")
    workflow.add_edge("record", END)

    return workflow.compile()
