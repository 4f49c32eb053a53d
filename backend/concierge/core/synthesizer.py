"""Synthesizer - combine task results into one final answer."""

import logging
from dataclasses import dataclass
from typing import Optional

from concierge.core.schemas import DeepAgentSession
from concierge.errors import ProviderError
from concierge.llm.base import LLMConfig

logger = logging.getLogger(__name__)

SYNTHESIS_TEMPERATURE = 0.7
SYNTHESIS_MAX_TOKENS = 2000

SYNTHESIS_SYSTEM_PROMPT = "You are an expert at synthesizing complex information into clear, comprehensive responses."


@dataclass
class SynthesisResult:
    content: str
    fallback: bool = False
    error: Optional[str] = None


def build_synthesis_prompt(session: DeepAgentSession) -> str:
    results = "\n".join(
        f"{i}. {result.reasoning}\n{result.content}\n"
        for i, result in enumerate(session.results, start=1)
    ) or "No task produced a result."
    reasoning = "\n".join(session.reasoning_log)

    return f"""You are synthesizing results from multiple specialized tasks to answer a complex query.

Original Query: {session.original_query}

Task Results:
{results}

Reasoning Process:
{reasoning}

Write a well-structured response that integrates the task results. Include:
1. A clear, direct answer to the original query
2. Supporting details from the research and analysis
3. Relevant recommendations or next steps
4. A brief summary of the reasoning process used"""


def build_local_synthesis(session: DeepAgentSession) -> str:
    """Deterministic answer built from raw task output; never empty"""
    completed = session.completed_tasks
    if not session.results:
        notes = "\n".join(f"- {note}" for note in session.reasoning_log) or "- No tasks were run."
        return (
            f'I attempted a multi-step analysis of "{session.original_query}", '
            f"but could not complete it right now.\n\nProcessing notes:\n{notes}"
        )

    body = "\n\n".join(f"{i}. {result.content}" for i, result in enumerate(session.results, start=1))
    failures = [note for note in session.reasoning_log if note.startswith("Task failed")]
    text = (
        f'Based on a multi-step analysis of "{session.original_query}", here is what I found:\n\n'
        f"{body}\n\n"
        f"This analysis used {len(completed)} specialized tasks "
        f"({', '.join(t.type.value for t in completed)})."
    )
    if failures:
        text += "\n\nNotes:\n" + "\n".join(f"- {note}" for note in failures)
    return text


class Synthesizer:
    """One LLM call over all results, with a local fallback"""

    def __init__(self, llm_service, model: Optional[str] = None, preferred_provider: Optional[str] = None):
        self.llm_service = llm_service
        self.model = model
        self.preferred_provider = preferred_provider

    async def synthesize(self, session: DeepAgentSession) -> SynthesisResult:
        try:
            response = await self.llm_service.generate(
                self.model,
                [
                    {"role": "system", "content": SYNTHESIS_SYSTEM_PROMPT},
                    {"role": "user", "content": build_synthesis_prompt(session)},
                ],
                LLMConfig(
                    temperature=SYNTHESIS_TEMPERATURE,
                    max_tokens=SYNTHESIS_MAX_TOKENS,
                    preferred_provider=self.preferred_provider,
                ),
            )
        except ProviderError as e:
            logger.warning(f"⚠️ Synthesis failed, using local synthesis: {e}")
            session.reasoning_log.append(f"Synthesis failed: {e}")
            return SynthesisResult(content=build_local_synthesis(session), fallback=True, error=str(e))

        if not response.content.strip():
            logger.warning("⚠️ Synthesis returned empty content, using local synthesis")
            return SynthesisResult(content=build_local_synthesis(session), fallback=True, error="empty synthesis")

        return SynthesisResult(content=response.content)
