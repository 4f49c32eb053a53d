"""Complexity Analyzer - rule-based structural complexity scoring.

Scores a query in [0, 1] from its text alone. Queries scoring at or above
the deep-path threshold go through decomposition instead of a single
responder.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

logger = logging.getLogger(__name__)

DEEP_PATH_THRESHOLD = 0.7

COMPLEXITY_KEYWORDS = [
    "analyze", "compare", "evaluate", "strategy", "plan", "comprehensive",
    "detailed", "thorough", "research", "investigate", "assess", "review",
    "pros and cons", "advantages and disadvantages", "step by step",
]

DOMAIN_KEYWORDS = [
    "investment", "funding", "market analysis", "due diligence",
    "business model", "competitive analysis", "financial projections",
    "regulatory", "legal", "compliance", "risk assessment",
]

MULTI_STEP_CONNECTIVES = ["and then", "after that", "next", "also", "additionally"]

# Complexity keywords that call for a research step
RESEARCH_KEYWORDS = ("research", "analyze")


@dataclass
class ComplexityAnalysis:
    """Score plus the evidence behind it"""
    score: float
    factors: List[str] = field(default_factory=list)
    multiple_questions: bool = False
    complexity_keywords: List[str] = field(default_factory=list)
    domain_keywords: List[str] = field(default_factory=list)
    multi_step: bool = False

    @property
    def needs_research(self) -> bool:
        return any(kw in RESEARCH_KEYWORDS for kw in self.complexity_keywords)

    @property
    def reasoning(self) -> str:
        return f"Query complexity score: {self.score:.2f} based on: {', '.join(self.factors) or 'no factors'}"

    def to_dict(self) -> Dict:
        return {
            "score": self.score,
            "factors": self.factors,
            "reasoning": self.reasoning,
        }


class ComplexityAnalyzer:
    """Decide between the simple and deep handling paths"""

    def __init__(self, threshold: float = DEEP_PATH_THRESHOLD):
        self.threshold = threshold

    def analyze(self, query: str) -> ComplexityAnalysis:
        lower = query.lower()
        analysis = ComplexityAnalysis(score=0.0)
        score = 0.0

        if len(query) > 100:
            analysis.factors.append("Long query")
            score += 0.2

        if query.count("?") > 1:
            analysis.multiple_questions = True
            analysis.factors.append("Multiple questions")
            score += 0.3

        analysis.complexity_keywords = [kw for kw in COMPLEXITY_KEYWORDS if kw in lower]
        if analysis.complexity_keywords:
            analysis.factors.append(f"Complexity keywords: {', '.join(analysis.complexity_keywords)}")
            score += min(0.15 * len(analysis.complexity_keywords), 0.4)

        analysis.domain_keywords = [kw for kw in DOMAIN_KEYWORDS if kw in lower]
        if analysis.domain_keywords:
            analysis.factors.append(f"Domain complexity: {', '.join(analysis.domain_keywords)}")
            score += min(0.1 * len(analysis.domain_keywords), 0.3)

        if any(conj in lower for conj in MULTI_STEP_CONNECTIVES):
            analysis.multi_step = True
            analysis.factors.append("Multi-step reasoning indicators")
            score += 0.2

        analysis.score = min(round(score, 4), 1.0)
        logger.debug(analysis.reasoning)
        return analysis

    def is_complex(self, analysis: ComplexityAnalysis) -> bool:
        return analysis.score >= self.threshold
