"""
Base classes and types for the Tool Execution System

Tools are deterministic helpers a responder may call while composing a
reply. The registry is the tool boundary: ``execute(tool_id, params)``
always returns a ``ToolResult`` and never raises.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from concierge.errors import ToolExecutionError

logger = logging.getLogger(__name__)


class ToolCategory(Enum):
    """Categories of tools available in the system"""
    FINANCE = "finance"
    PLANNING = "planning"
    RESEARCH = "research"


@dataclass
class ToolResult:
    """Result from a tool execution"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    execution_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "execution_time": self.execution_time,
            "metadata": self.metadata
        }


class BaseTool(ABC):
    """
    Base class for all tools in the system.

    All tools must inherit from this class and implement:
    - execute(): Main execution logic
    - validate_params(): Parameter validation
    """

    def __init__(self, tool_id: str, category: ToolCategory):
        self.tool_id = tool_id
        self.category = category
        self.description = ""
        self.parameters: Dict[str, Any] = {}

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """
        Execute the tool with given parameters.

        Raises:
            ToolExecutionError: If the parameters cannot be processed
        """
        pass

    @abstractmethod
    def validate_params(self, **kwargs) -> bool:
        """Return True if the parameters are acceptable"""
        pass

    def get_schema(self) -> Dict:
        """
        Return JSON schema for tool parameters.

        Returns:
            Dict: Tool schema including id, category, description, parameters
        """
        return {
            "id": self.tool_id,
            "category": self.category.value,
            "description": self.description,
            "parameters": self.parameters
        }

    async def _execute_with_timing(self, **kwargs) -> ToolResult:
        start_time = time.time()
        result = await self.execute(**kwargs)
        result.execution_time = time.time() - start_time
        return result


class ToolRegistry:
    """Holds tool instances and executes them with a timeout"""

    def __init__(self, timeout_seconds: float = 15.0):
        self._tools: Dict[str, BaseTool] = {}
        self.timeout_seconds = timeout_seconds

    def register(self, tool: BaseTool) -> None:
        self._tools[tool.tool_id] = tool
        logger.debug(f"Registered tool: {tool.tool_id}")

    def get(self, tool_id: str) -> Optional[BaseTool]:
        return self._tools.get(tool_id)

    def list_tools(self) -> List[Dict]:
        return [tool.get_schema() for tool in self._tools.values()]

    async def execute(self, tool_id: str, params: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Execute a tool by id

        Args:
            tool_id: Registered tool id
            params: Tool parameters

        Returns:
            ToolResult (success=False on unknown tool, invalid params,
            tool error, timeout or any unexpected exception)
        """
        if params is None:
            params = {}
        tool = self._tools.get(tool_id)
        if tool is None:
            logger.warning(f"⚠️ Unknown tool requested: {tool_id}")
            return ToolResult(success=False, error=f"Unknown tool: {tool_id}")

        if not isinstance(params, dict):
            return ToolResult(success=False, error=f"Invalid parameters for {tool_id}: expected an object")

        try:
            if not tool.validate_params(**params):
                return ToolResult(success=False, error=f"Invalid parameters for {tool_id}")

            return await asyncio.wait_for(
                tool._execute_with_timing(**params),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"❌ Tool {tool_id} timed out after {self.timeout_seconds}s")
            return ToolResult(success=False, error=f"Tool {tool_id} timed out")
        except ToolExecutionError as e:
            logger.error(f"❌ Tool {tool_id} failed: {e}")
            return ToolResult(success=False, error=str(e))
        except Exception as e:
            logger.error(f"❌ Tool {tool_id} raised {type(e).__name__}: {e}", exc_info=True)
            return ToolResult(success=False, error=f"Tool {tool_id} failed: {type(e).__name__}: {e}")
