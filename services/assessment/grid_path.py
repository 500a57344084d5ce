# services/assessment/grid_path.py
"""Grid-path simulator and scorer for the GRID_PATH question type.

A team submits a sequence of moves (`U`, `D`, `L`, `R`) through a small grid
world. The simulator walks the path from `start`, charging `step_cost` per move
and `water_penalty` per water cell entered, and stops with `goal_reward` as soon
as the goal is reached. Moves after the goal are ignored.

Points are awarded only when the goal is reached with every move in bounds, and
follow fixed absolute reward gaps below the key's `optimal_reward`:

- reward >= optimal          -> 100%
- reward >= optimal - 2      -> 80%
- reward >= optimal - 4      -> 60%
- reward > 0                 -> 40%
- otherwise                  -> 20%

The bands assume the authoring scale of the sample questions (step cost -1,
water penalty -3).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from packages.schemas.assessment import GridConfig, GridPathKey, Number, ScoreResult

MOVES = {"U": (-1, 0), "D": (1, 0), "L": (0, -1), "R": (0, 1)}

ERR_NO_MOVES = "No moves provided"
ERR_OUT_OF_BOUNDS = "Invalid move (out of bounds)"
ERR_BAD_TOKEN = "Invalid move token"
ERR_GOAL_NOT_REACHED = "Goal not reached"
ERR_BAD_CONFIG = "Invalid grid configuration"
ERR_BAD_KEY = "Invalid answer key"


@dataclass
class Simulation:
    """State of a walk through the grid once the moves have been consumed."""
    valid: bool = True
    goal_reached: bool = False
    steps: int = 0
    water_hits: int = 0
    reward: Number = 0
    path: List[List[int]] = field(default_factory=list)
    error: Optional[str] = None


def simulate(moves: Sequence[Any], config: GridConfig) -> Simulation:
    """Walk `moves` through the grid described by `config`.

    Halts on the first out-of-bounds move or unrecognised token (``valid=False``),
    or on entering the goal cell. Partial path, steps, and reward accumulated
    before a halt are kept for the explanation panel.
    """
    rows, cols = config.grid_size
    water = set(config.water)
    row, col = config.start
    sim = Simulation(path=[[row, col]])

    for token in moves:
        delta = MOVES.get(token.upper()) if isinstance(token, str) else None
        if delta is None:
            sim.valid, sim.error = False, ERR_BAD_TOKEN
            break
        nxt_row, nxt_col = row + delta[0], col + delta[1]
        if not (1 <= nxt_row <= rows and 1 <= nxt_col <= cols):
            sim.valid, sim.error = False, ERR_OUT_OF_BOUNDS
            break

        row, col = nxt_row, nxt_col
        sim.path.append([row, col])
        sim.steps += 1
        sim.reward += config.step_cost

        if (row, col) in water:
            sim.reward += config.water_penalty
            sim.water_hits += 1

        if (row, col) == config.goal:
            sim.reward += config.goal_reward
            break

    sim.goal_reached = (row, col) == config.goal
    if sim.valid and not sim.goal_reached:
        sim.error = ERR_GOAL_NOT_REACHED
    return sim


def reward_points(reward: Number, optimal_reward: Number, max_points: int) -> int:
    """Map a goal-reaching reward onto the fixed grading bands."""
    if reward >= optimal_reward:
        return max_points
    if reward >= optimal_reward - 2:
        return max_points * 8 // 10
    if reward >= optimal_reward - 4:
        return max_points * 6 // 10
    if reward > 0:
        return max_points * 4 // 10
    return max_points * 2 // 10


def efficiency(reward: Number, optimal_reward: Number) -> int:
    """Optimal reward as a percentage of the achieved reward, rounded half-up."""
    return math.floor(Fraction(optimal_reward) / max(Fraction(reward), 1) * 100 + Fraction(1, 2))


def _extract_moves(user_answer: Any) -> Optional[list]:
    if isinstance(user_answer, dict):
        user_answer = user_answer.get("moves")
    if isinstance(user_answer, (list, tuple)):
        return list(user_answer)
    return None


def score_grid_path(user_answer: Any, key: Any, max_points: int, config: Any) -> ScoreResult:
    """Score a GRID_PATH answer. Never raises; malformed input scores 0 with an `error`."""
    try:
        grid_key = GridPathKey.model_validate(key)
    except ValidationError:
        return ScoreResult(points=0, meta={"correct": False, "valid": False, "error": ERR_BAD_KEY})
    try:
        grid = GridConfig.model_validate(config)
    except ValidationError:
        return ScoreResult(points=0, meta={"correct": False, "valid": False, "error": ERR_BAD_CONFIG,
                                           "optimalPath": grid_key.optimal_path})

    moves = _extract_moves(user_answer)
    if moves is None:
        return ScoreResult(points=0, meta={
            "correct": False,
            "valid": False,
            "error": ERR_NO_MOVES,
            "userPath": [],
            "optimalPath": grid_key.optimal_path,
        })

    sim = simulate(moves, grid)
    meta = {
        "valid": sim.valid,
        "goalReached": sim.goal_reached,
        "steps": sim.steps,
        "waterHits": sim.water_hits,
        "reward": sim.reward,
        "userPath": sim.path,
        "optimalPath": grid_key.optimal_path,
    }
    if not sim.valid or not sim.goal_reached:
        meta.update(correct=False, error=sim.error)
        return ScoreResult(points=0, meta=meta)

    points = reward_points(sim.reward, grid_key.optimal_reward, max_points)
    meta.update(
        correct=points == max_points,
        optimalReward=grid_key.optimal_reward,
        optimalSteps=grid_key.optimal_steps,
        efficiency=efficiency(sim.reward, grid_key.optimal_reward),
    )
    return ScoreResult(points=points, meta=meta)
