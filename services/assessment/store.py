# services/assessment/store.py
"""In-memory submission store and leaderboard.

Holds one submission per (team, activity) and a running total per team. The
submission record and the total update happen under one lock, so concurrent
submits for the same pair cannot both be recorded.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from packages.schemas.assessment import LeaderboardEntry

log = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for submission store errors."""


class AlreadySubmittedError(StoreError):
    """Raised when a team submits the same activity twice."""

    def __init__(self, team_id: str, activity_id: str) -> None:
        super().__init__(f"team {team_id} already submitted activity {activity_id}")
        self.team_id = team_id
        self.activity_id = activity_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Submission:
    team_id: str
    activity_id: str
    answers: Dict[str, Any]
    score: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class TeamScore:
    team_id: str
    total: int = 0
    updated_at: datetime = field(default_factory=_utcnow)


class SubmissionStore:
    """Thread-safe store of submissions and per-team totals."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._submissions: Dict[Tuple[str, str], Submission] = {}
        self._scores: Dict[str, TeamScore] = {}

    def has_submitted(self, team_id: str, activity_id: str) -> bool:
        with self._lock:
            return (team_id, activity_id) in self._submissions

    def record(self, team_id: str, activity_id: str, answers: Dict[str, Any], score: int) -> Submission:
        """Record a scored submission and add its score to the team total.

        Raises:
            AlreadySubmittedError: the team already has a submission for this activity.
        """
        with self._lock:
            if (team_id, activity_id) in self._submissions:
                raise AlreadySubmittedError(team_id, activity_id)
            sub = Submission(team_id=team_id, activity_id=activity_id, answers=dict(answers), score=score)
            self._submissions[(team_id, activity_id)] = sub
            team = self._scores.setdefault(team_id, TeamScore(team_id=team_id))
            team.total += score
            team.updated_at = sub.created_at
        log.info("recorded submission", extra={"team_id": team_id, "activity_id": activity_id, "score": score})
        return sub

    def leaderboard(self) -> List[LeaderboardEntry]:
        """Teams by total descending; the earlier last update wins ties."""
        with self._lock:
            scores = sorted(self._scores.values(), key=lambda s: (-s.total, s.updated_at))
        return [
            LeaderboardEntry(rank=i, team_id=s.team_id, score=s.total, last_updated=s.updated_at)
            for i, s in enumerate(scores, start=1)
        ]

    def clear(self) -> None:
        with self._lock:
            self._submissions.clear()
            self._scores.clear()
