"""Tests for the Assessment service FastAPI app."""

import pytest
from httpx import ASGITransport, AsyncClient

from services.assessment import app as app_module
from services.assessment.app import app

OPTIMAL = {"moves": ["U", "U", "U", "U", "R", "R", "R", "R"]}


@pytest.fixture(autouse=True)
def _fresh_store():
    app_module.STORE.clear()
    yield
    app_module.STORE.clear()


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health_echoes_request_id() -> None:
    """Health endpoint responds and echoes the correlation id."""
    async with _client() as ac:
        r = await ac.get("/health", headers={"X-Request-ID": "abc"})
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Request-ID"] == "abc"


@pytest.mark.asyncio
async def test_score_endpoint() -> None:
    payload = {
        "questions": [
            {"id": "q1", "type": "MCQ", "points": 2, "aiAnswerKey": {"correct": 1}, "aiExplanation": {"why": "x"}},
            {"id": "q2", "type": "CHECKBOX", "points": 5, "aiAnswerKey": {"correctSet": [0, 1, 3, 4], "grading": "partial"}},
        ],
        "answers": {"q1": {"selected": 1}, "q2": {"selected": [0, 1]}},
    }
    async with _client() as ac:
        r = await ac.post("/assessment/score", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 4
    assert body["perQuestion"] == [
        {"questionId": "q1", "points": 2, "correct": True},
        {"questionId": "q2", "points": 2, "correct": False},
    ]
    assert body["explanations"][0]["ai"] == {"why": "x"}


@pytest.mark.asyncio
async def test_activities_hide_answer_keys() -> None:
    async with _client() as ac:
        r = await ac.get("/assessment/activities")
    assert r.status_code == 200
    activities = r.json()
    assert [a["id"] for a in activities] == ["sprint-1", "sprint-2", "sprint-3", "sprint-4"]
    for a in activities:
        for q in a["questions"]:
            assert "aiAnswerKey" not in q and "answer_key" not in q
            assert "aiExplanation" not in q


@pytest.mark.asyncio
async def test_submit_scores_once_per_team() -> None:
    async with _client() as ac:
        first = await ac.post("/assessment/activities/sprint-2/submit", json={"teamId": "t1", "answers": {"s2-q1": OPTIMAL}})
        again = await ac.post("/assessment/activities/sprint-2/submit", json={"teamId": "t1", "answers": {"s2-q1": OPTIMAL}})
    assert first.status_code == 200
    assert first.json()["success"] is True
    assert first.json()["score"] == 10
    assert first.json()["explanations"][0]["meta"]["reward"] == 2
    assert again.status_code == 400
    assert again.json()["detail"] == "Already submitted this activity"


@pytest.mark.asyncio
async def test_submit_unknown_activity() -> None:
    async with _client() as ac:
        r = await ac.post("/assessment/activities/nope/submit", json={"teamId": "t1", "answers": {}})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_submit_rejected_when_event_closed(monkeypatch) -> None:
    monkeypatch.setattr(app_module.settings, "EVENT_OPEN", False)
    async with _client() as ac:
        r = await ac.post("/assessment/activities/sprint-1/submit", json={"teamId": "t1", "answers": {}})
    assert r.status_code == 400
    assert r.json()["detail"] == "Event is not open"


@pytest.mark.asyncio
async def test_submit_requires_team_id() -> None:
    async with _client() as ac:
        r = await ac.post("/assessment/activities/sprint-1/submit", json={"answers": {}})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_leaderboard_hidden_by_default() -> None:
    async with _client() as ac:
        r = await ac.get("/assessment/leaderboard")
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_leaderboard_ranks_teams(monkeypatch) -> None:
    monkeypatch.setattr(app_module.settings, "LEADERBOARD_VISIBILITY", "TEAMS")
    async with _client() as ac:
        await ac.post("/assessment/activities/sprint-1/submit",
                      json={"teamId": "slow", "answers": {"s1-q1": {"selected": 0}}})
        await ac.post("/assessment/activities/sprint-2/submit",
                      json={"teamId": "fast", "answers": {"s2-q1": OPTIMAL}})
        r = await ac.get("/assessment/leaderboard")
    assert r.status_code == 200
    board = r.json()
    assert [(e["rank"], e["teamId"], e["score"]) for e in board] == [(1, "fast", 10), (2, "slow", 2)]


@pytest.mark.asyncio
async def test_openapi_uses_service_name() -> None:
    """OpenAPI schema carries the configured service name as its title."""
    async with _client() as ac:
        r = await ac.get("/openapi.json")
    assert r.status_code == 200
    assert r.json()["info"]["title"] == app_module.settings.SERVICE_NAME


@pytest.mark.asyncio
async def test_score_endpoint_non_finite_key_scores_zero() -> None:
    body = (
        '{"questions": [{"id": "g", "type": "GRID_PATH", "points": 10,'
        ' "prompt": {"gridSize": [5, 5], "start": [5, 1], "goal": [1, 5],'
        ' "stepCost": -1, "goalReward": 10, "waterPenalty": -3},'
        ' "aiAnswerKey": {"optimalSteps": 8, "optimalReward": Infinity}}],'
        ' "answers": {"g": {"moves": ["U", "U", "U", "U", "R", "R", "R", "R"]}}}'
    )
    async with _client() as ac:
        r = await ac.post("/assessment/score", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 200
    assert r.json()["total"] == 0
    assert r.json()["explanations"][0]["meta"]["error"] == "Invalid answer key"
