"""
LLM client for business problem analysis.
"""

from .client import SolverClient, get_solver_client, to_result

__all__ = ["SolverClient", "get_solver_client", "to_result"]
