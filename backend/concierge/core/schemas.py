"""Deep Pipeline Schemas

Data structures for decomposed query processing: the tasks produced by the
decomposer and the per-query session the executor and synthesizer work on.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TaskType(str, Enum):
    """Kind of work a deep task performs"""
    RESEARCH = "research"
    ANALYSIS = "analysis"
    SYNTHESIS = "synthesis"
    REASONING = "reasoning"
    PLANNING = "planning"


class TaskStatus(str, Enum):
    """Status of a deep task"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class SessionStatus(str, Enum):
    PLANNING = "planning"
    EXECUTING = "executing"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Output of one completed task"""
    task_id: str
    content: str
    reasoning: str
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "content": self.content,
            "reasoning": self.reasoning,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class DeepTask:
    """A single node in the task graph

    Attributes:
        id: Task identifier, unique within its session
        description: Human-readable description
        type: Kind of work
        priority: Lower runs earlier in prompts; informational only
        dependencies: Ids of tasks that must complete first
        status: Current execution status
        result: Output once completed
    """
    id: str
    description: str
    type: TaskType
    priority: int
    dependencies: List[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[TaskResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "type": self.type.value,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
        }


@dataclass
class DeepAgentSession:
    """State of one complex query while it is decomposed, executed and synthesized"""
    original_query: str
    tasks: List[DeepTask] = field(default_factory=list)
    id: str = field(default_factory=lambda: f"deep-{uuid.uuid4().hex[:12]}")
    status: SessionStatus = SessionStatus.PLANNING
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    results: List[TaskResult] = field(default_factory=list)
    reasoning_log: List[str] = field(default_factory=list)

    def get_task(self, task_id: str) -> Optional[DeepTask]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def dependencies_met(self, task: DeepTask) -> bool:
        """True when every dependency exists and is completed"""
        for dep_id in task.dependencies:
            dep = self.get_task(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True

    @property
    def completed_tasks(self) -> List[DeepTask]:
        return [t for t in self.tasks if t.status == TaskStatus.COMPLETED]

    @property
    def processing_time_ms(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds() * 1000

    def get_progress(self) -> Dict[str, Any]:
        """Get execution progress"""
        completed = len(self.completed_tasks)
        failed = sum(1 for t in self.tasks if t.status == TaskStatus.FAILED)
        total = len(self.tasks)
        return {
            "total": total,
            "completed": completed,
            "failed": failed,
            "pending": total - completed - failed,
            "percentage": (completed / total * 100) if total > 0 else 0,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "original_query": self.original_query,
            "tasks": [t.to_dict() for t in self.tasks],
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "results": [r.to_dict() for r in self.results],
            "reasoning_log": list(self.reasoning_log),
        }
