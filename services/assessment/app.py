# services/assessment/app.py
"""FastAPI app for the sprint Assessment Service:
- /assessment/score: score an ad-hoc list of questions against answers
- /assessment/activities: frozen sprints visible to teams (answer keys stripped)
- /assessment/activities/{activity_id}/submit: score and record a team's one submission
- /assessment/leaderboard: ranked team totals, when visible to teams
"""

import logging
from typing import Dict, List

from fastapi import FastAPI, HTTPException

from packages.common.config import get_settings
from packages.common.logging import configure_logging
from packages.common.tracing import trace_middleware
from packages.schemas.assessment import (
    LeaderboardEntry,
    PublicActivity,
    ScoreRequest,
    SubmissionResult,
    SubmitRequest,
    SubmitResponse,
)
from .bank import ActivityNotFoundError, load_bank
from .scorer import score_submission
from .store import AlreadySubmittedError, SubmissionStore

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.SERVICE_NAME)
log = logging.getLogger(__name__)

app = FastAPI(title=settings.SERVICE_NAME, version="1.0.0")
app.middleware("http")(trace_middleware)

BANK = load_bank(settings.QUESTION_BANK_PATH)
STORE = SubmissionStore()


@app.get("/health", tags=["system"])
def health() -> Dict[str, str]:
    return {"status": "ok", "env": settings.ENV}


@app.post("/assessment/score", response_model=SubmissionResult)
def score(req: ScoreRequest) -> SubmissionResult:
    """Score `req.questions` against `req.answers` without recording anything."""
    return score_submission(req.questions, req.answers)


@app.get("/assessment/activities", response_model=List[PublicActivity])
def list_activities() -> List[PublicActivity]:
    """Return frozen activities with answer keys and explanations removed."""
    return [
        PublicActivity.model_validate(a.model_dump(exclude={"questions": {"__all__": {"answer_key", "explanation"}}}))
        for a in BANK.activities(frozen_only=True)
    ]


@app.post("/assessment/activities/{activity_id}/submit", response_model=SubmitResponse)
def submit(activity_id: str, req: SubmitRequest) -> SubmitResponse:
    """Score a team's answers for one activity and add the result to its total."""
    try:
        activity = BANK.get(activity_id)
    except ActivityNotFoundError:
        raise HTTPException(404, "Activity not found")
    if not activity.is_frozen:
        raise HTTPException(400, "Activity not available yet")
    if not settings.EVENT_OPEN:
        raise HTTPException(400, "Event is not open")
    if STORE.has_submitted(req.team_id, activity.id):
        raise HTTPException(400, "Already submitted this activity")

    result = score_submission(activity.questions, req.answers)
    log.info("team %s scored %d on %s", req.team_id, result.total, activity.id)
    try:
        STORE.record(req.team_id, activity.id, req.answers, result.total)
    except AlreadySubmittedError:
        raise HTTPException(400, "Already submitted this activity")

    return SubmitResponse(score=result.total, per_question=result.per_question, explanations=result.explanations)


@app.get("/assessment/leaderboard", response_model=List[LeaderboardEntry])
def leaderboard() -> List[LeaderboardEntry]:
    """Return the ranked leaderboard if it is visible to teams."""
    if settings.LEADERBOARD_VISIBILITY != "TEAMS":
        raise HTTPException(403, "Leaderboard is not visible to teams")
    return STORE.leaderboard()

