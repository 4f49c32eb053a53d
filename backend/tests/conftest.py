"""Shared test fixtures."""
import os
import sys
from typing import Callable, Dict, List, Optional

import pytest

# Add backend to path so tests run without an editable install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from concierge.core.catalog import build_default_registry
from concierge.core.complexity import ComplexityAnalyzer
from concierge.core.decomposer import TaskDecomposer
from concierge.core.deep_agent import DeepAgentPipeline
from concierge.core.executor import TaskExecutor
from concierge.core.orchestrator import AgentOrchestrator
from concierge.core.synthesizer import Synthesizer
from concierge.errors import ProviderError
from concierge.llm.base import LLMConfig, LLMResponse
from concierge.responders.base import build_responders
from concierge.tools import build_default_tools


class FakeLLMService:
    """Stands in for LLMService; answers from a script or always fails"""

    def __init__(self, reply: Optional[Callable[[List[Dict[str, str]]], str]] = None, fail: bool = False):
        self.reply = reply or (lambda messages: "This is a generated answer from the model.")
        self.fail = fail
        self.calls = []

    async def generate(self, model, messages, params: Optional[LLMConfig] = None) -> LLMResponse:
        self.calls.append({"model": model, "messages": messages, "params": params})
        if self.fail:
            raise ProviderError("All LLM providers failed - fake: connection refused")
        return LLMResponse(content=self.reply(messages), model=model or "fake-model")


def make_orchestrator(llm) -> AgentOrchestrator:
    registry = build_default_registry()
    return AgentOrchestrator(
        registry=registry,
        responders=build_responders(registry, llm, tools=build_default_tools()),
        deep_pipeline=DeepAgentPipeline(TaskDecomposer(), TaskExecutor(llm), Synthesizer(llm)),
        analyzer=ComplexityAnalyzer(),
    )


@pytest.fixture
def fake_llm():
    return FakeLLMService()


@pytest.fixture
def failing_llm():
    return FakeLLMService(fail=True)


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def orchestrator(fake_llm):
    return make_orchestrator(fake_llm)


@pytest.fixture
def failing_orchestrator(failing_llm):
    return make_orchestrator(failing_llm)


@pytest.fixture
def make_llm():
    """Factory for scripted fake LLM services"""
    return FakeLLMService


@pytest.fixture
def orchestrator_for():
    """Factory building an orchestrator around a given LLM service"""
    return make_orchestrator
