"""Tests for the `score` CLI entrypoint."""

import json

from main import main, score_file

SUBMISSION = {
    "questions": [
        {"id": "q1", "type": "TRUE_FALSE", "points": 2, "aiAnswerKey": {"correct": False}},
        {"id": "q2", "type": "MCQ", "points": 3},
    ],
    "answers": {"q1": {"selected": False}},
}


def test_score_file(tmp_path) -> None:
    path = tmp_path / "submission.json"
    path.write_text(json.dumps(SUBMISSION), encoding="utf-8")
    out = score_file(str(path))
    assert out["total"] == 2
    assert out["perQuestion"][1] == {"questionId": "q2", "points": 0, "correct": False}
    assert out["explanations"][1]["meta"]["error"] == "No answer key available"


def test_main_score_prints_json(tmp_path, capsys) -> None:
    path = tmp_path / "submission.json"
    path.write_text(json.dumps(SUBMISSION), encoding="utf-8")
    assert main(["score", str(path)]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["total"] == 2
