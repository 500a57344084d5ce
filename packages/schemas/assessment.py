"""Assessment schemas for sprint questions, answer keys, grid configs, and scoring results."""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

GradingMode = Literal["exact", "partial"]
# Reward magnitudes are bounded so simulated sums stay exact and finite.
REWARD_LIMIT = 1_000_000_000
Number = Union[
    Annotated[int, Field(ge=-REWARD_LIMIT, le=REWARD_LIMIT)],
    Annotated[float, Field(ge=-REWARD_LIMIT, le=REWARD_LIMIT)],
]
Cell = Tuple[int, int]


class _Model(BaseModel):
    """Base model accepting field names or camelCase aliases; rejects inf and NaN."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)


class Question(_Model):
    """A question as stored in the question bank.

    `type` is a free string so unrecognised types still reach the scorer dispatch.
    """
    id: str
    type: str
    points: PositiveInt
    order: int = 0
    prompt: Dict[str, Any] = {}
    options: Optional[List[Any]] = None
    answer_key: Optional[Dict[str, Any]] = Field(default=None, alias="aiAnswerKey")
    explanation: Any = Field(default=None, alias="aiExplanation")


class CheckboxKey(_Model):
    """Answer key for CHECKBOX questions."""
    correct_set: List[int] = Field(alias="correctSet")
    grading: GradingMode = "exact"


class GridPathKey(_Model):
    """Benchmark for GRID_PATH questions; never compared for path equality."""
    optimal_path: Optional[str] = Field(default=None, alias="optimalPath")
    optimal_steps: int = Field(alias="optimalSteps")
    optimal_reward: Number = Field(alias="optimalReward")


class GridConfig(_Model):
    """Grid world taken from a GRID_PATH question prompt. Cells are 1-indexed (row, col)."""
    grid_size: Cell = Field(alias="gridSize")
    start: Cell
    goal: Cell
    water: List[Cell] = []
    step_cost: Number = Field(alias="stepCost")
    goal_reward: Number = Field(alias="goalReward")
    water_penalty: Number = Field(alias="waterPenalty")


class ScoreResult(BaseModel):
    """Points awarded for one question plus explanation metadata."""
    points: int
    meta: Dict[str, Any]


class QuestionOutcome(_Model):
    question_id: str = Field(alias="questionId")
    points: int
    correct: bool


class Explanation(_Model):
    question_id: str = Field(alias="questionId")
    ai: Any = None
    meta: Dict[str, Any]


class SubmissionResult(_Model):
    """Aggregate of a scoring run: total plus ordered per-question outcomes and explanations."""
    total: int
    per_question: List[QuestionOutcome] = Field(default_factory=list, alias="perQuestion")
    explanations: List[Explanation] = Field(default_factory=list)


class Activity(_Model):
    """A sprint: an ordered group of questions, visible to teams once frozen."""
    id: str
    title: str
    description: Optional[str] = None
    order: int = 0
    is_frozen: bool = Field(default=False, alias="isFrozen")
    questions: List[Question] = []


class PublicQuestion(_Model):
    """A question as shown to teams, with answer key and explanation removed."""
    id: str
    type: str
    points: int
    order: int = 0
    prompt: Dict[str, Any] = {}
    options: Optional[List[Any]] = None


class PublicActivity(_Model):
    id: str
    title: str
    description: Optional[str] = None
    order: int = 0
    questions: List[PublicQuestion] = []


class ScoreRequest(_Model):
    """Ad-hoc scoring payload: questions in display order and the team's answers."""
    questions: List[Question]
    answers: Dict[str, Any] = {}


class SubmitRequest(_Model):
    """A team's answers for one activity, keyed by question id."""
    team_id: str = Field(alias="teamId")
    answers: Dict[str, Any]


class SubmitResponse(_Model):
    success: bool = True
    score: int
    per_question: List[QuestionOutcome] = Field(alias="perQuestion")
    explanations: List[Explanation]


class LeaderboardEntry(_Model):
    rank: int
    team_id: str = Field(alias="teamId")
    score: int
    last_updated: datetime = Field(alias="lastUpdated")
