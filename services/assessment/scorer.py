# services/assessment/scorer.py
"""Scoring engine for sprint submissions.

Functions:
- score_mcq / score_true_false: full points on a strictly equal single value.
- score_checkbox: exact-set or partial-credit grading of multi-select answers.
- score_grid_path: re-exported from `grid_path`.
- score_submission: dispatch each question to its scorer and aggregate the results.

Every scorer returns a `ScoreResult` and sets `meta["correct"]` explicitly.
None of them raise on malformed answers or keys; bad input scores 0.
"""

import logging
import math
from fractions import Fraction
from typing import Any, List, Mapping, Sequence

from pydantic import ValidationError

from packages.schemas.assessment import (
    CheckboxKey,
    Explanation,
    Question,
    QuestionOutcome,
    ScoreResult,
    SubmissionResult,
)
from .grid_path import ERR_BAD_KEY, score_grid_path

log = logging.getLogger(__name__)

ERR_NO_KEY = "No answer key available"
ERR_UNKNOWN_TYPE = "Unknown question type"

_MISSING = object()


def _selected(user_answer: Any) -> Any:
    """Unwrap the `{"selected": ...}` envelope; bare values pass through."""
    if user_answer is None:
        return _MISSING
    if isinstance(user_answer, dict):
        value = user_answer.get("selected")
        return _MISSING if value is None else value
    return user_answer


def strict_equal(a: Any, b: Any) -> bool:
    """Equality that never lets a bool match a number or a string match a number."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


def _score_single(user_answer: Any, key: Any, max_points: int) -> ScoreResult:
    selected = _selected(user_answer)
    if selected is _MISSING:
        return ScoreResult(points=0, meta={"correct": False, "userAnswer": None})
    if not isinstance(key, dict) or "correct" not in key:
        return ScoreResult(points=0, meta={"correct": False, "userAnswer": selected, "error": ERR_BAD_KEY})

    correct = strict_equal(selected, key["correct"])
    return ScoreResult(
        points=max_points if correct else 0,
        meta={"correct": correct, "userAnswer": selected, "correctAnswer": key["correct"]},
    )


def score_mcq(user_answer: Any, key: Any, max_points: int) -> ScoreResult:
    """Full points iff the selected option index equals `key["correct"]`."""
    return _score_single(user_answer, key, max_points)


def score_true_false(user_answer: Any, key: Any, max_points: int) -> ScoreResult:
    """Full points iff the selected boolean equals `key["correct"]`."""
    return _score_single(user_answer, key, max_points)


def _is_index(value: Any) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int) and not isinstance(value, bool)


def score_checkbox(user_answer: Any, key: Any, max_points: int) -> ScoreResult:
    """Grade a multi-select answer against `key.correct_set`.

    In ``exact`` mode only the identical set earns points. In ``partial`` mode a
    perfect answer earns full points; otherwise, when at least one correct option
    was chosen, points are ``floor(max * (hits/|correct| - 0.5 * wrong/|correct|))``
    floored at zero. Wrong picks are weighed against the size of the correct set,
    not the number of options.
    """
    selected = _selected(user_answer)
    if not isinstance(selected, (list, tuple)) or not all(_is_index(x) for x in selected):
        return ScoreResult(points=0, meta={"correct": False, "userAnswer": []})
    try:
        checkbox_key = CheckboxKey.model_validate(key)
    except ValidationError:
        return ScoreResult(points=0, meta={"correct": False, "userAnswer": list(selected), "error": ERR_BAD_KEY})

    user_set = {int(x) for x in selected}
    correct_set = set(checkbox_key.correct_set)
    hits = user_set & correct_set

    if checkbox_key.grading == "exact":
        is_exact = user_set == correct_set
        return ScoreResult(
            points=max_points if is_exact else 0,
            meta={
                "correct": is_exact,
                "userAnswer": list(selected),
                "correctAnswer": checkbox_key.correct_set,
                "matches": len(hits),
            },
        )

    wrong = user_set - correct_set
    missed = correct_set - user_set
    points = 0
    if not wrong and not missed:
        points = max_points
    elif hits:
        size = len(correct_set)
        ratio = Fraction(len(hits), size) - Fraction(len(wrong), 2 * size)
        points = max(0, math.floor(max_points * ratio))

    return ScoreResult(
        points=points,
        meta={
            "correct": points == max_points,
            "userAnswer": list(selected),
            "correctAnswer": checkbox_key.correct_set,
            "correctSelections": len(hits),
            "wrongSelections": len(wrong),
            "missedSelections": len(missed),
        },
    )


def score_question(q: Question, user_answer: Any) -> ScoreResult:
    """Dispatch one question to the scorer for its type."""
    key = q.answer_key
    if key is None:
        log.warning("no answer key; scoring 0", extra={"question_id": q.id})
        return ScoreResult(points=0, meta={"correct": False, "error": ERR_NO_KEY})

    if q.type == "MCQ":
        return score_mcq(user_answer, key, q.points)
    elif q.type == "CHECKBOX":
        return score_checkbox(user_answer, key, q.points)
    elif q.type == "TRUE_FALSE":
        return score_true_false(user_answer, key, q.points)
    elif q.type == "GRID_PATH":
        return score_grid_path(user_answer, key, q.points, q.prompt)

    log.warning("unknown question type %r; scoring 0", q.type, extra={"question_id": q.id})
    return ScoreResult(points=0, meta={"correct": False, "error": ERR_UNKNOWN_TYPE})


def score_submission(questions: Sequence[Question], answers: Mapping[str, Any]) -> SubmissionResult:
    """Score every question in display order and aggregate the total.

    A question counts as correct unless its scorer marked ``correct`` as False.
    """
    total = 0
    per_question: List[QuestionOutcome] = []
    explanations: List[Explanation] = []

    for q in questions:
        result = score_question(q, answers.get(q.id))
        total += result.points
        per_question.append(QuestionOutcome(
            question_id=q.id,
            points=result.points,
            correct=result.meta.get("correct") is not False,
        ))
        explanations.append(Explanation(question_id=q.id, ai=q.explanation, meta=result.meta))

    log.debug("scored %d questions, total=%d", len(per_question), total)
    return SubmissionResult(total=total, per_question=per_question, explanations=explanations)


__all__: List[str] = [
    "score_mcq",
    "score_true_false",
    "score_checkbox",
    "score_grid_path",
    "score_question",
    "score_submission",
    "strict_equal",
]
