"""Sprint scoring entrypoint.

- `serve`: run the Assessment Service under uvicorn
- `score`: score a JSON file of `{"questions": [...], "answers": {...}}` and print the result
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv

from packages.common.logging import configure_logging
from packages.schemas.assessment import ScoreRequest
from services.assessment.scorer import score_submission

log = logging.getLogger("sprintscore")


def score_file(path: str) -> dict:
    """Validate and score a submission file; return the camelCase result payload."""
    raw = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    req = ScoreRequest.model_validate(raw)
    result = score_submission(req.questions, req.answers)
    log.info("scored %s: total=%d over %d questions", path, result.total, len(result.per_question))
    return result.model_dump(by_alias=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    load_dotenv(".env")
    ap = argparse.ArgumentParser(prog="sprintscore", description="Sprint scoring entrypoint")
    sub = ap.add_subparsers(dest="cmd", required=True)
    serve = sub.add_parser("serve", help="Run the Assessment Service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    score = sub.add_parser("score", help="Score a submission JSON file")
    score.add_argument("path")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    configure_logging(args.log_level)
    if args.cmd == "serve":
        uvicorn.run("services.assessment.app:app", host=args.host, port=args.port)
        return 0

    json.dump(score_file(args.path), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
