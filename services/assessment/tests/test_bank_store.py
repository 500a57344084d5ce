"""Tests for question bank loading and the in-memory submission store."""

import json
import threading

import pytest
from pydantic import ValidationError

from services.assessment.bank import ActivityNotFoundError, load_bank, seed_bank
from services.assessment.store import AlreadySubmittedError, SubmissionStore

BANK_YAML = """
activities:
  - id: later
    title: Second
    order: 2
    isFrozen: true
    questions:
      - id: b
        type: MCQ
        order: 2
        points: 1
        aiAnswerKey: {correct: 1}
      - id: a
        type: TRUE_FALSE
        order: 1
        points: ${TF_POINTS}
        aiAnswerKey: {correct: true}
  - id: first
    title: First
    order: 1
"""


def test_seed_bank_has_four_frozen_sprints() -> None:
    bank = seed_bank()
    assert [a.id for a in bank.activities(frozen_only=True)] == ["sprint-1", "sprint-2", "sprint-3", "sprint-4"]
    assert bank.get("sprint-2").questions[0].type == "GRID_PATH"


def test_load_bank_without_path_uses_seed() -> None:
    assert len(load_bank(None).activities()) == 4


def test_load_yaml_orders_and_substitutes_env(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("TF_POINTS", "3")
    path = tmp_path / "bank.yaml"
    path.write_text(BANK_YAML, encoding="utf-8")
    bank = load_bank(str(path))
    assert [a.id for a in bank.activities()] == ["first", "later"]
    assert [a.id for a in bank.activities(frozen_only=True)] == ["later"]
    later = bank.get("later")
    assert [q.id for q in later.questions] == ["a", "b"]
    assert later.questions[0].points == 3


def test_load_json(tmp_path) -> None:
    path = tmp_path / "bank.json"
    path.write_text(json.dumps({"activities": [{"id": "x", "title": "X"}]}), encoding="utf-8-sig")
    assert load_bank(str(path)).get("x").title == "X"


def test_load_invalid_bank_raises(tmp_path) -> None:
    path = tmp_path / "bank.yaml"
    path.write_text("activities:\n  - id: x\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_bank(str(path))


def test_load_missing_or_unsupported(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_bank(str(tmp_path / "missing.yaml"))
    path = tmp_path / "bank.txt"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_bank(str(path))


def test_unknown_activity() -> None:
    with pytest.raises(ActivityNotFoundError):
        seed_bank().get("missing")


def test_store_rejects_second_submission() -> None:
    store = SubmissionStore()
    store.record("t1", "a1", {}, 5)
    with pytest.raises(AlreadySubmittedError):
        store.record("t1", "a1", {}, 5)
    store.record("t1", "a2", {}, 3)
    assert store.leaderboard()[0].score == 8


def test_store_concurrent_submits_record_once() -> None:
    store = SubmissionStore()
    errors = []

    def submit() -> None:
        try:
            store.record("t1", "a1", {}, 4)
        except AlreadySubmittedError as e:
            errors.append(e)

    threads = [threading.Thread(target=submit) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(errors) == 7
    assert store.leaderboard()[0].score == 4


def test_leaderboard_ties_go_to_earlier_update() -> None:
    store = SubmissionStore()
    store.record("early", "a1", {}, 5)
    store.record("late", "a1", {}, 5)
    store.record("top", "a1", {}, 9)
    board = store.leaderboard()
    assert [(e.rank, e.team_id) for e in board] == [(1, "top"), (2, "early"), (3, "late")]
