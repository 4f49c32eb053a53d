"""Tool execution boundary and built-in tools."""

from concierge.tools.base import BaseTool, ToolCategory, ToolRegistry, ToolResult
from concierge.tools.funding import FundingCalculatorTool, FundingStagesTool
from concierge.tools.markers import ToolMarker, parse_tool_markers


def build_default_tools(timeout_seconds: float = 15.0) -> ToolRegistry:
    """Registry with every built-in tool"""
    registry = ToolRegistry(timeout_seconds=timeout_seconds)
    registry.register(FundingCalculatorTool())
    registry.register(FundingStagesTool())
    return registry


__all__ = [
    "BaseTool",
    "ToolCategory",
    "ToolRegistry",
    "ToolResult",
    "FundingCalculatorTool",
    "FundingStagesTool",
    "ToolMarker",
    "parse_tool_markers",
    "build_default_tools",
]
