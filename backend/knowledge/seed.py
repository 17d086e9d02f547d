"""
Built-in data for a fresh knowledge base.

SEED_RECORDS is the fallback collection used whenever no valid persisted
knowledge base exists. EXAMPLE_PROBLEMS are starter problems offered to
users who don't know where to begin; they are not records.
"""

from typing import Dict, List

from .models import (
    AnalysisResult,
    BusinessArea,
    GroundedAnswer,
    ProblemAnalysis,
    Solution,
    SolutionRecord,
    SolutionStep,
    Source,
)


SEED_RECORDS: List[SolutionRecord] = [
    SolutionRecord(
        id="seed-001",
        timestamp="2024-05-20T10:00:00.000Z",
        company_type="Fashion e-commerce",
        niche="Sustainable clothing for young adults",
        problem_description=(
            "Sales dropped 20% last quarter. The sales team reports fewer "
            "qualified leads and a lower close rate."
        ),
        business_area=BusinessArea.SALES,
        result=AnalysisResult(
            problem_analysis=ProblemAnalysis(
                identified_problem="Lead quality fell after paid campaigns were broadened to generic audiences.",
                impact="Lower close rate and higher acquisition cost are shrinking quarterly margin.",
            ),
            short_term_solution=Solution(
                title="Tighten lead qualification",
                summary="Score incoming leads and route only qualified ones to sales.",
                steps=[
                    SolutionStep(title="Define an ICP", description="Agree on the ideal customer profile with sales and marketing."),
                    SolutionStep(title="Add lead scoring", description="Score leads on engagement and fit before handoff."),
                ],
            ),
            long_term_solution=Solution(
                title="Build a retention engine",
                summary="Grow repeat purchases through a loyalty program and lifecycle email.",
                steps=[
                    SolutionStep(title="Launch loyalty tiers", description="Reward repeat buyers with early access to collections."),
                    SolutionStep(title="Automate lifecycle email", description="Trigger messages on first purchase, lapse and replenishment."),
                ],
                is_premium=True,
            ),
        ),
    ),
    SolutionRecord(
        id="seed-002",
        timestamp="2024-05-18T15:30:00.000Z",
        company_type="Regional distributor",
        niche="Food and beverage supply",
        problem_description=(
            "Customers keep complaining about late deliveries and we are "
            "losing accounts because of it."
        ),
        business_area=BusinessArea.LOGISTICS,
        result=GroundedAnswer(
            answer=(
                "Late deliveries usually come from poor route planning and missing "
                "shipment visibility. Start with route optimization software and "
                "proactive delay notifications, then review carrier SLAs."
            ),
            sources=[
                Source(title="Last-mile delivery best practices", uri="https://example.com/last-mile"),
                Source(uri="https://example.com/carrier-sla"),
            ],
        ),
    ),
]


EXAMPLE_PROBLEMS: List[Dict[str, str]] = [
    {
        "title": "Falling sales",
        "description": (
            "Our sales dropped 20% last quarter and we are not sure why. The sales "
            "team reports fewer qualified leads and a lower close rate."
        ),
        "area": BusinessArea.SALES.value,
    },
    {
        "title": "Low social engagement",
        "description": (
            "We post content on social media regularly, but engagement (likes, "
            "comments, shares) is very low and we are not gaining new followers."
        ),
        "area": BusinessArea.MARKETING.value,
    },
    {
        "title": "High staff turnover",
        "description": (
            "Turnover in our development department is high. In the last 6 months "
            "30% of the team resigned, hurting project deadlines."
        ),
        "area": BusinessArea.HR.value,
    },
    {
        "title": "Shipping delays",
        "description": (
            "Customers constantly complain about late deliveries. Our logistics "
            "process looks inefficient and we are losing customers over it."
        ),
        "area": BusinessArea.LOGISTICS.value,
    },
]
