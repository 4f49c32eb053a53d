"""Funding tools - burn-rate arithmetic and funding stage reference data."""

import logging
from typing import Any, Dict, List

from concierge.errors import ToolExecutionError
from concierge.tools.base import BaseTool, ToolCategory, ToolResult

logger = logging.getLogger(__name__)


FUNDING_STAGES: List[Dict[str, Any]] = [
    {
        "stage": "Pre-Seed",
        "description": "Initial funding to validate idea and build MVP",
        "typical_range": "$50K - $500K",
        "time_to_raise": "2-4 months",
        "key_metrics": ["Problem validation", "Early customer interest", "Team assembly"],
        "investors": ["Friends & Family", "Angel Investors", "Pre-seed VCs", "Accelerators"],
    },
    {
        "stage": "Seed",
        "description": "Product-market fit and initial traction funding",
        "typical_range": "$500K - $3M",
        "time_to_raise": "3-6 months",
        "key_metrics": ["Product-market fit", "Revenue growth", "User engagement"],
        "investors": ["Angel Investors", "Seed VCs", "Strategic Investors"],
    },
    {
        "stage": "Series A",
        "description": "Scale proven business model with significant growth",
        "typical_range": "$3M - $15M",
        "time_to_raise": "4-8 months",
        "key_metrics": ["$1M+ ARR", "Strong unit economics", "Proven scalability"],
        "investors": ["Tier 1 VCs", "Growth Equity", "Corporate VCs"],
    },
    {
        "stage": "Series B",
        "description": "Aggressive expansion and market leadership",
        "typical_range": "$15M - $50M",
        "time_to_raise": "6-12 months",
        "key_metrics": ["$10M+ ARR", "Market leadership", "Path to profitability"],
        "investors": ["Growth VCs", "Late-stage funds", "Private equity"],
    },
]


def calculate_monthly_burn(
    team_size: int,
    avg_salary: float,
    operational_costs: float,
    marketing_budget: float,
) -> float:
    """Monthly burn from annual salary, operations and marketing figures"""
    return (team_size * avg_salary) / 12 + operational_costs / 12 + marketing_budget / 12


class FundingCalculatorTool(BaseTool):
    """Estimate monthly burn and the capital needed to cover a runway"""

    def __init__(self):
        super().__init__("funding-calculator", ToolCategory.FINANCE)
        self.description = "Calculate monthly burn rate and total funding required for a runway"
        self.parameters = {
            "team_size": {"type": "integer", "required": True},
            "avg_salary": {"type": "number", "default": 100000},
            "operational_costs": {"type": "number", "default": 0},
            "marketing_budget": {"type": "number", "default": 0},
            "months": {"type": "integer", "default": 18},
        }

    def validate_params(self, **kwargs) -> bool:
        return "team_size" in kwargs

    async def execute(self, **kwargs) -> ToolResult:
        try:
            team_size = int(kwargs["team_size"])
            avg_salary = float(kwargs.get("avg_salary", 100000))
            operational = float(kwargs.get("operational_costs", 0))
            marketing = float(kwargs.get("marketing_budget", 0))
            months = int(kwargs.get("months", 18))
        except (TypeError, ValueError) as e:
            raise ToolExecutionError(self.tool_id, f"non-numeric parameter: {e}") from e

        if team_size < 0 or months <= 0:
            raise ToolExecutionError(self.tool_id, "team_size must be >= 0 and months > 0")

        monthly_burn = calculate_monthly_burn(team_size, avg_salary, operational, marketing)
        return ToolResult(
            success=True,
            data={
                "monthly_burn": round(monthly_burn, 2),
                "months": months,
                "total_required": round(monthly_burn * months, 2),
            },
        )


class FundingStagesTool(BaseTool):
    """Look up typical ranges and investors for a funding stage"""

    def __init__(self):
        super().__init__("funding-stages", ToolCategory.FINANCE)
        self.description = "Reference data for Pre-Seed through Series B funding rounds"
        self.parameters = {"stage": {"type": "string", "required": False}}

    def validate_params(self, **kwargs) -> bool:
        return True

    async def execute(self, **kwargs) -> ToolResult:
        stage = str(kwargs.get("stage") or "").strip().lower().replace("-", " ")
        if not stage:
            return ToolResult(success=True, data=FUNDING_STAGES)

        for scenario in FUNDING_STAGES:
            if scenario["stage"].lower() == stage:
                return ToolResult(success=True, data=scenario)
        return ToolResult(success=False, error=f"Unknown funding stage: {kwargs.get('stage')}")
