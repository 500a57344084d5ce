# services/assessment/bank.py
"""Question bank for the assessment service.

- Built-in seed event (four sprints) used when no bank file is configured.
- Loads YAML/JSON bank files with ${ENV_VAR} substitution from os.environ.
- UTF-8 files are read with or without a BOM.
- Validation errors are logged in full and re-raised unchanged.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ValidationError

from packages.schemas.assessment import Activity

log = logging.getLogger(__name__)


class ActivityNotFoundError(LookupError):
    """Raised when an activity id is not in the bank."""


class BankFile(BaseModel):
    """Top-level layout of a question bank file."""
    activities: List[Activity]


SEED_ACTIVITIES: List[Dict[str, Any]] = [
    {
        "id": "sprint-1",
        "title": "Sprint 1: Pattern Hunt",
        "description": "Learn how AI recognizes patterns through supervised learning",
        "order": 1,
        "isFrozen": True,
        "questions": [
            {
                "id": "s1-q1",
                "type": "MCQ",
                "order": 1,
                "points": 2,
                "prompt": {
                    "text": "An AI sees these training examples: Triangle+Green→A, Square+Blue→B, "
                            "Triangle+Blue→A. What label would it give to: Triangle+Red?",
                    "hint": "Look for the pattern in the shapes",
                },
                "options": ["A", "B", "Not sure"],
                "aiAnswerKey": {"correct": 0},
                "aiExplanation": {
                    "kind": "decisionRule",
                    "ruleText": "Triangle → A",
                    "why": "The AI learned that triangles always get label A, regardless of color",
                },
            },
            {
                "id": "s1-q2",
                "type": "TRUE_FALSE",
                "order": 2,
                "points": 2,
                "prompt": {
                    "text": "True or False: An AI trained only on daytime photos of cars will work "
                            "perfectly on nighttime photos.",
                },
                "aiAnswerKey": {"correct": False},
                "aiExplanation": {
                    "kind": "concept",
                    "concept": "Overfitting",
                    "why": "AI needs diverse training data to work in different conditions",
                },
            },
        ],
    },
    {
        "id": "sprint-2",
        "title": "Sprint 2: Reward Runner",
        "description": "Explore reinforcement learning through path-finding challenges",
        "order": 2,
        "isFrozen": True,
        "questions": [
            {
                "id": "s2-q1",
                "type": "GRID_PATH",
                "order": 1,
                "points": 10,
                "prompt": {
                    "gridSize": [5, 5],
                    "start": [5, 1],
                    "goal": [1, 5],
                    "water": [[2, 3], [3, 2], [4, 4]],
                    "stepCost": -1,
                    "goalReward": 10,
                    "waterPenalty": -3,
                },
                "aiAnswerKey": {"optimalPath": "U,U,U,U,R,R,R,R", "optimalSteps": 8, "optimalReward": 2},
                "aiExplanation": {
                    "kind": "pathOverlay",
                    "grid": {"rows": 5, "cols": 5, "water": [[2, 3], [3, 2], [4, 4]]},
                    "optimalPath": "U,U,U,U,R,R,R,R",
                    "math": "Reward = +10 (goal) - 8 (steps) = +2",
                },
            },
        ],
    },
    {
        "id": "sprint-3",
        "title": "Sprint 3: Bias Detective",
        "description": "Discover fairness issues in AI training data",
        "order": 3,
        "isFrozen": True,
        "questions": [
            {
                "id": "s3-q1",
                "type": "CHECKBOX",
                "order": 1,
                "points": 5,
                "prompt": {
                    "text": "An AI trained on 100 Apple photos (all daytime) and 10 Guava photos (all "
                            "nighttime) is failing. Which fixes would help? (Select all that apply)",
                },
                "options": [
                    "Add more daytime Guava photos",
                    "Add more nighttime Apple photos",
                    "Remove all nighttime photos",
                    "Use equal numbers of each fruit",
                    "Test on both day and night photos",
                ],
                "aiAnswerKey": {"correctSet": [0, 1, 3, 4], "grading": "partial"},
                "aiExplanation": {
                    "kind": "fairnessPanel",
                    "datasetSketch": {"apple_day": 100, "apple_night": 0, "guava_day": 0, "guava_night": 10},
                    "issues": ["class imbalance", "confounding variable (time of day)"],
                    "whyFixes": [
                        "Adding diverse examples removes the confounding",
                        'Balance prevents the AI from just memorizing "day=apple"',
                        "Testing on both conditions reveals problems early",
                    ],
                },
            },
        ],
    },
    {
        "id": "sprint-4",
        "title": "Sprint 4: Reality Check",
        "description": "Learn to identify AI-generated content and stay safe online",
        "order": 4,
        "isFrozen": True,
        "questions": [
            {
                "id": "s4-q1",
                "type": "MCQ",
                "order": 1,
                "points": 3,
                "prompt": {
                    "text": "You receive a video of your favorite celebrity asking for money. "
                            "The lip-sync looks slightly off. What should you do?",
                },
                "options": [
                    "Send money immediately",
                    "Share with all friends first",
                    "Verify through official channels",
                    "Assume it's real if it looks mostly good",
                ],
                "aiAnswerKey": {"correct": 2},
                "aiExplanation": {
                    "kind": "safetyTip",
                    "principle": "SCOUT - C: Check sources",
                    "redFlags": ["unusual request", "imperfect lip-sync"],
                    "why": "Deepfakes often have subtle flaws. Always verify unexpected requests "
                           "through official channels.",
                },
            },
        ],
    },
]


class QuestionBank:
    """Read-only collection of activities, each with questions in display order."""

    def __init__(self, activities: List[Activity]) -> None:
        ordered = sorted(activities, key=lambda a: a.order)
        self._activities: Dict[str, Activity] = {}
        for a in ordered:
            questions = sorted(a.questions, key=lambda q: q.order)
            self._activities[a.id] = a.model_copy(update={"questions": questions})

    def activities(self, frozen_only: bool = False) -> List[Activity]:
        return [a for a in self._activities.values() if a.is_frozen or not frozen_only]

    def get(self, activity_id: str) -> Activity:
        try:
            return self._activities[activity_id]
        except KeyError:
            raise ActivityNotFoundError(activity_id) from None


def seed_bank() -> QuestionBank:
    """Return the built-in sample event."""
    return QuestionBank(BankFile(activities=SEED_ACTIVITIES).activities)


# ========================
# File loading
# ========================

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _sub_env_vars(text: str) -> str:
    """Replace ${VAR} with os.environ['VAR']; unknown vars are left as-is so validation flags them."""
    return _ENV_PATTERN.sub(lambda m: os.getenv(m.group(1), m.group(0)), text)


def _detect_file_type_and_load(path: Path) -> Dict[str, Any]:
    """Detect file type by suffix and dispatch to the appropriate parser."""
    if not path.exists():
        raise FileNotFoundError(f"Question bank not found: {path}")

    suffix = path.suffix.lower()
    with open(path, "r", encoding="utf-8-sig") as f:
        text = _sub_env_vars(f.read())
    if suffix == ".json":
        return json.loads(text)
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)

    raise ValueError(f"Unsupported question bank file type: {path.suffix}")


def load_bank(bank_path: Optional[str] = None) -> QuestionBank:
    """Load and validate a question bank.

    Args:
        bank_path: Optional YAML/JSON path. Without it the built-in seed event is used.

    Returns:
        QuestionBank

    Raises:
        FileNotFoundError / ValueError / ValidationError
    """
    if not bank_path:
        log.info("No question bank configured; using built-in seed event")
        return seed_bank()

    path = Path(bank_path).expanduser().resolve()
    raw = _detect_file_type_and_load(path)

    try:
        bank = BankFile.model_validate(raw)
    except ValidationError as e:
        log.error("Invalid question bank format at %s", path)
        log.error("Validation details:\n%s", e.json(indent=2))
        raise

    log.info("Loaded %d activities from %s", len(bank.activities), path)
    return QuestionBank(bank.activities)
