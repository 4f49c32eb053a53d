"""Unit tests for the deep pipeline: executor, synthesizer and orchestration"""

import pytest

from concierge.core.complexity import ComplexityAnalysis, ComplexityAnalyzer
from concierge.core.decomposer import TaskDecomposer
from concierge.core.deep_agent import DeepAgentPipeline
from concierge.core.executor import TaskExecutor
from concierge.core.schemas import DeepAgentSession, DeepTask, SessionStatus, TaskResult, TaskStatus, TaskType
from concierge.core.synthesizer import Synthesizer, build_local_synthesis
from concierge.errors import ProviderError
from concierge.llm.base import LLMResponse


def session_with(*tasks, query="Compare A and B"):
    return DeepAgentSession(original_query=query, tasks=list(tasks))


class FlakyLLM:
    """Fails for prompts mentioning a marker phrase"""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    async def generate(self, model, messages, params=None):
        self.calls += 1
        if any(self.fail_on in m["content"] for m in messages):
            raise ProviderError("upstream timeout")
        return LLMResponse(content=f"answer {self.calls}", model="fake")


class TestTaskExecutor:
    """Single linear pass with partial-failure tolerance"""

    @pytest.mark.asyncio
    async def test_runs_tasks_in_order(self, fake_llm):
        session = session_with(
            DeepTask(id="t1", description="first", type=TaskType.RESEARCH, priority=1),
            DeepTask(id="t2", description="second", type=TaskType.ANALYSIS, priority=2, dependencies=["t1"]),
        )

        await TaskExecutor(fake_llm).execute(session)

        assert [t.status for t in session.tasks] == [TaskStatus.COMPLETED, TaskStatus.COMPLETED]
        assert [r.task_id for r in session.results] == ["t1", "t2"]
        assert session.reasoning_log == ["Executing: first", "Executing: second"]
        assert fake_llm.calls[0]["params"].temperature == 0.6
        assert fake_llm.calls[0]["params"].max_tokens == 1500

    @pytest.mark.asyncio
    async def test_later_prompts_include_previous_results(self, make_llm):
        llm = make_llm(reply=lambda messages: "finding")
        session = session_with(
            DeepTask(id="t1", description="first", type=TaskType.RESEARCH, priority=1),
            DeepTask(id="t2", description="second", type=TaskType.ANALYSIS, priority=2, dependencies=["t1"]),
        )

        await TaskExecutor(llm).execute(session)

        assert "None yet." in llm.calls[0]["messages"][0]["content"]
        assert "finding" in llm.calls[1]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_failure_skips_dependents_and_continues(self):
        llm = FlakyLLM(fail_on="Task Description: flaky")
        session = session_with(
            DeepTask(id="t1", description="flaky", type=TaskType.RESEARCH, priority=1),
            DeepTask(id="t2", description="needs t1", type=TaskType.ANALYSIS, priority=2, dependencies=["t1"]),
            DeepTask(id="t3", description="independent", type=TaskType.ANALYSIS, priority=3),
        )

        await TaskExecutor(llm).execute(session)

        assert session.tasks[0].status == TaskStatus.FAILED
        assert session.tasks[1].status == TaskStatus.PENDING
        assert session.tasks[2].status == TaskStatus.COMPLETED
        assert "Task failed: upstream timeout" in session.reasoning_log
        assert "Skipped: needs t1 (dependencies not met)" in session.reasoning_log
        assert llm.calls == 2

    @pytest.mark.asyncio
    async def test_unknown_dependency_is_unmet(self, fake_llm):
        session = session_with(
            DeepTask(id="t1", description="orphan", type=TaskType.ANALYSIS, priority=1, dependencies=["ghost"]),
        )

        await TaskExecutor(fake_llm).execute(session)

        assert session.tasks[0].status == TaskStatus.PENDING
        assert fake_llm.calls == []


class TestSynthesizer:
    """Final answer generation and the local fallback"""

    @pytest.mark.asyncio
    async def test_llm_synthesis(self, make_llm):
        llm = make_llm(reply=lambda messages: "Final answer")
        session = session_with()

        result = await Synthesizer(llm).synthesize(session)

        assert result.content == "Final answer"
        assert result.fallback is False
        assert "Compare A and B" in llm.calls[0]["messages"][1]["content"]
        assert llm.calls[0]["params"].max_tokens == 2000

    @pytest.mark.asyncio
    async def test_fallback_on_provider_error(self, failing_llm):
        session = session_with()
        session.reasoning_log.append("Task failed: boom")

        result = await Synthesizer(failing_llm).synthesize(session)

        assert result.fallback is True
        assert result.error
        assert "Task failed: boom" in result.content
        assert session.reasoning_log[-1].startswith("Synthesis failed:")

    @pytest.mark.asyncio
    async def test_fallback_on_empty_content(self, make_llm):
        result = await Synthesizer(make_llm(reply=lambda messages: "   ")).synthesize(session_with())

        assert result.fallback is True
        assert result.content.strip()

    def test_local_synthesis_concatenates_results(self):
        task = DeepTask(id="t1", description="research", type=TaskType.RESEARCH, priority=1,
                        status=TaskStatus.COMPLETED)
        session = session_with(task)
        session.results.append(TaskResult(task_id="t1", content="Market is growing", reasoning="r"))
        session.reasoning_log.append("Task failed: second task down")

        text = build_local_synthesis(session)

        assert "1. Market is growing" in text
        assert "(research)" in text
        assert "- Task failed: second task down" in text

    def test_local_synthesis_never_empty(self):
        assert build_local_synthesis(session_with()).strip()


class TestDeepAgentPipeline:
    """End-to-end deep path with fake LLMs"""

    @pytest.mark.asyncio
    async def test_successful_run(self, fake_llm):
        pipeline = DeepAgentPipeline(TaskDecomposer(), TaskExecutor(fake_llm), Synthesizer(fake_llm))
        query = "Analyze the market for legal tech and investment options in detail"

        outcome = await pipeline.run(query, ComplexityAnalyzer().analyze(query))

        assert outcome.session.status == SessionStatus.COMPLETED
        assert outcome.session.get_progress()["completed"] == len(outcome.session.tasks)
        assert outcome.session.reasoning_log[0].startswith("Initiated deep processing")
        assert outcome.content == "This is a generated answer from the model."
        assert pipeline.get_session(outcome.session.id) is outcome.session

        stats = pipeline.get_session_stats()
        assert stats["total"] == 1
        assert stats["completed"] == 1
        assert stats["success_rate"] == 1.0

    @pytest.mark.asyncio
    async def test_total_outage_still_answers(self, failing_llm):
        pipeline = DeepAgentPipeline(TaskDecomposer(), TaskExecutor(failing_llm), Synthesizer(failing_llm))
        analysis = ComplexityAnalysis(score=0.9, complexity_keywords=["analyze"], domain_keywords=["funding"])

        outcome = await pipeline.run("Analyze funding options", analysis)

        assert outcome.content.strip()
        assert "Task failed" in outcome.content
        assert outcome.synthesis.fallback is True
        assert outcome.session.get_progress()["completed"] == 0
        assert pipeline.get_session_stats()["success_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_recent_sessions_bounded(self, fake_llm):
        pipeline = DeepAgentPipeline(TaskDecomposer(), TaskExecutor(fake_llm), Synthesizer(fake_llm),
                                     history_size=2)

        for _ in range(3):
            await pipeline.run("q", ComplexityAnalysis(score=0.9))

        assert pipeline.get_session_stats()["total"] == 2
