from __future__ import annotations

import json
from pathlib import Path
from textwrap import dedent
from typing import Any, Callable, Dict, Optional

from assessment.types import JudgeVerdict, Question
from config.registry import JUDGE_KEY, bind_model
from config.routes import LlmRoute, load_config, resolve_route
from config.settings import settings
from llm_gateway import HttpClient, chat

JUDGE_TARGET = "answer_judge"

SYSTEM_PROMPT = dedent(
    """
    You are an expert Excel interviewer and evaluator. You assess candidates' Excel
    knowledge and skills from their answers to technical questions.

    EVALUATION CRITERIA:
    1. Technical accuracy of the formula, function or concept.
    2. Syntax correctness for Excel.
    3. Completeness of the answer.
    4. Efficiency and best practice.
    5. Conceptual understanding.

    SCORING GUIDELINES:
    - 90-100: Excellent, perfect or near-perfect with deep understanding
    - 80-89: Good, correct approach with minor issues
    - 70-79: Satisfactory, generally correct with some errors
    - 60-69: Needs improvement, partially correct with significant gaps
    - 50-59: Poor, major errors or misunderstanding
    - 0-49: Inadequate, incorrect or no meaningful answer

    PARTIAL CREDIT:
    - Award credit for correct concepts even with syntax errors.
    - Recognise alternative valid approaches.
    - Take the candidate's level into account.

    Be fair, consistent and constructive.
    """
).strip()

RESPONSE_CONTRACT = dedent(
    """
    Return a JSON object with:
    - score: number 0-100 for accuracy and completeness.
    - confidence: number 0-1 for how sure you are of the score.
    - reasoning: explanation of the scoring rationale.
    - partialCredits: array of objects with criterion, points, reasoning.
    - suggestedFollowUp: optional follow-up question when useful.
    """
).strip()

Judge = Callable[..., JudgeVerdict]


def build_prompt(question: Question, answer_text: str, context: Dict[str, Any]) -> str:  # Compose evaluation prompt
    expected = "\n".join(f"- {pattern}" for pattern in question.expected_patterns) or "- (open answer)"
    scores = json.dumps(context.get("skill_scores", {}), sort_keys=True)
    sections = [
        "QUESTION DETAILS:",
        f"Category: {question.category.value}",
        f"Difficulty: {question.difficulty.value}",
        f"Question: {question.text}",
        "",
        "EXPECTED ANSWERS:",
        expected,
        "",
        "EVALUATION RUBRIC:",
        str(context.get("rubric", "")),
        "",
        "CANDIDATE CONTEXT:",
        f"Level: {context.get('role_level', 'unknown')}",
        f"Previous performance: {scores}",
        f"Overall so far: {context.get('overall_score', 0.0)}",
        "",
        "CANDIDATE RESPONSE:",
        f'"{answer_text}"',
        "",
        RESPONSE_CONTRACT,
    ]
    return "\n".join(sections)


def make_llm_judge(route: LlmRoute, *, client: Optional[HttpClient] = None) -> Judge:
    """Return an answer judge that asks ``route`` for a :class:`JudgeVerdict`."""

    def judge(
        *,
        question: Question,
        answer_text: str,
        context: Dict[str, Any],
        timeout_s: Optional[float] = None,
    ) -> JudgeVerdict:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(question, answer_text, context)},
        ]
        return chat(messages, JudgeVerdict, cfg=route, client=client, timeout_s=timeout_s)

    return judge


def bind_llm_judge(path: Optional[Path] = None, *, client: Optional[HttpClient] = None) -> LlmRoute:
    """Load the route for the answer judge from config and bind it.

    Raises:
        ValueError: No config path was given or configured.
        KeyError: The config has no route for the answer judge.
    """

    config_path = path or settings.LLM_CONFIG_PATH
    if not config_path:
        raise ValueError("LLM_CONFIG_PATH is not set")
    route = resolve_route(load_config(Path(config_path)), JUDGE_TARGET)
    bind_model(JUDGE_KEY, make_llm_judge(route, client=client))
    return route
