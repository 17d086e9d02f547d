"""
Business Problem Solver - AI analyses collected into a knowledge base

Users describe a business problem, get an AI-generated analysis, and build
up a local knowledge base of every analysis they generated.

Features:
- Two analysis modes: deep analysis or web-grounded answer
- Persisted, newest-first knowledge base with filtering
- Record selection for partial export
- Markdown (selection), CSV and JSON (everything) downloads
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

# get_settings() loads backend/.env; it must run before tracing reads ARIZE_* below
from config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# --- Arize AX Auto-Instrumentation (MUST be before LangGraph imports) ---
if os.getenv("ARIZE_SPACE_ID") and os.getenv("ARIZE_API_KEY"):
    try:
        from arize.otel import register
        from openinference.instrumentation.langchain import LangChainInstrumentor
        tp = register(space_id=os.getenv("ARIZE_SPACE_ID"), api_key=os.getenv("ARIZE_API_KEY"), project_name="business-solver")
        LangChainInstrumentor().instrument(tracer_provider=tp, include_chains=True, include_agents=True, include_tools=True)
        logger.info("Arize AX tracing enabled for project 'business-solver'")
    except Exception as e:
        logger.warning("Arize tracing setup failed: %s", e)

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Literal

# Local imports
from delivery import DownloadSink
from exporters import ExportFormat
from exporters.service import export
from knowledge import EXAMPLE_PROBLEMS, BusinessArea, SelectionTracker, SolutionRecord
from knowledge.storage import JsonFileStorage, SolutionStore
from llm import get_solver_client
from workflow import MODE_DEEP, build_solver_workflow, initial_state


# ============================================================================
# Pydantic Models
# ============================================================================

class SolveRequest(BaseModel):
    """Request to analyze a business problem."""
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., description="The problem, in the user's words")
    company_type: str = Field(..., alias="companyType", description="e.g. Fashion e-commerce")
    niche: str = Field(..., description="e.g. Sustainable clothing for young adults")
    business_area: BusinessArea = Field(default=BusinessArea.GENERAL, alias="businessArea")
    mode: Literal["deep", "search"] = Field(
        default=MODE_DEEP,
        description="deep: structured analysis; search: answer grounded on web sources",
    )


class SelectionResponse(BaseModel):
    """Current export selection."""
    selected: List[str]
    all_selected: bool


# ============================================================================
# Dependencies
# ============================================================================

# Process-wide state, created at startup
solution_store: Optional[SolutionStore] = None
selection = SelectionTracker()
solver_workflow = None


def get_store() -> SolutionStore:
    if solution_store is None:
        raise HTTPException(status_code=503, detail="Knowledge base not initialized")
    return solution_store


def get_selection() -> SelectionTracker:
    return selection


def get_workflow(store: SolutionStore = Depends(get_store)):
    """Build the solve workflow on first use so the app starts without an API key."""
    global solver_workflow
    if solver_workflow is None:
        solver_workflow = build_solver_workflow(get_solver_client(), store)
    return solver_workflow


def _selection_response(store: SolutionStore, tracker: SelectionTracker) -> SelectionResponse:
    live_ids = store.ids()
    return SelectionResponse(
        selected=[record_id for record_id in live_ids if tracker.is_selected(record_id)],
        all_selected=tracker.all_selected(live_ids),
    )


# ============================================================================
# FastAPI Application
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global solution_store
    settings = get_settings()
    solution_store = SolutionStore(JsonFileStorage(settings.data_dir))
    logger.info("Knowledge base loaded with %d records from %s", len(solution_store), settings.data_dir)
    yield


app = FastAPI(
    title="Business Problem Solver",
    description="AI analysis of business problems with an exportable knowledge base",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "business-solver"}


@app.get("/api/examples")
async def list_examples() -> List[Dict[str, str]]:
    """Starter problems for users who don't know where to begin."""
    return EXAMPLE_PROBLEMS


@app.get("/api/areas")
async def list_areas() -> List[Dict[str, str]]:
    """Business areas with display labels."""
    return [{"value": area.value, "label": area.label} for area in BusinessArea]


@app.post("/api/solve", response_model=SolutionRecord)
async def solve_problem(request: SolveRequest, workflow: Any = Depends(get_workflow)):
    """
    Analyze a business problem and store the result.

    This endpoint:
    1. Validates that description, company type and niche are filled in
    2. Runs the AI analysis in the requested mode
    3. Stores the result as the newest knowledge base record

    Returns the stored record.
    """
    if not (request.description.strip() and request.company_type.strip() and request.niche.strip()):
        raise HTTPException(
            status_code=400,
            detail="Please fill in every field: description, company type and niche.",
        )

    state = initial_state(
        description=request.description,
        company_type=request.company_type,
        niche=request.niche,
        business_area=request.business_area,
        mode=request.mode,
    )

    try:
        final_state = await workflow.ainvoke(state)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    if final_state.get("error"):
        raise HTTPException(status_code=500, detail=final_state["error"])

    return final_state["record"]


@app.get("/api/solutions", response_model=List[SolutionRecord])
def list_solutions(
    area: Optional[BusinessArea] = None,
    q: Optional[str] = None,
    store: SolutionStore = Depends(get_store),
):
    """Knowledge base records, newest first, optionally filtered."""
    return store.filter(area=area, query=q)


@app.get("/api/solutions/{record_id}", response_model=SolutionRecord)
def get_solution(record_id: str, store: SolutionStore = Depends(get_store)):
    record = store.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Solution not found: {record_id}")
    return record


@app.delete("/api/solutions", status_code=204)
def clear_solutions(
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    """Empty the knowledge base."""
    store.clear()
    tracker.clear()
    return Response(status_code=204)


@app.get("/api/selection", response_model=SelectionResponse)
def get_current_selection(
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    return _selection_response(store, tracker)


@app.post("/api/selection/toggle/{record_id}", response_model=SelectionResponse)
def toggle_selection(
    record_id: str,
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    tracker.toggle(record_id)
    return _selection_response(store, tracker)


@app.post("/api/selection/all", response_model=SelectionResponse)
def select_all(
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    tracker.select_all(store.ids())
    return _selection_response(store, tracker)


@app.delete("/api/selection", response_model=SelectionResponse)
def clear_selection(
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    tracker.clear()
    return _selection_response(store, tracker)


@app.get("/api/export/{fmt}")
def export_knowledge_base(
    fmt: ExportFormat,
    store: SolutionStore = Depends(get_store),
    tracker: SelectionTracker = Depends(get_selection),
):
    """
    Download the knowledge base.

    markdown exports the selected records; csv and json export everything.
    Responds 204 when there is nothing to export.
    """
    sink = DownloadSink()
    file_name = export(fmt, store, tracker, sink)
    if file_name is None:
        return Response(status_code=204)
    return sink.response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
