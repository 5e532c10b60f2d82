"""
Heuristic Evaluator - Scores candidate moves for bot decision-making.

The evaluator assigns a numeric score to a move based on:
- Height features (climbing up, standing high)
- Win features (stepping onto level 3)
- Build features (raising cells next to own workers, capping opponent climbs)

Weights can be adjusted to create different play styles.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.board import Position, MAX_HEIGHT, WIN_HEIGHT
from ..engine_core.game import Snapshot
from ..engine_core.move import Move, MoveKind


@dataclass
class EvaluationWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance.
    """
    # Moving
    winning_move: float = 1000.0
    height_gain: float = 10.0  # Per level climbed
    target_height: float = 3.0  # Per level of the destination

    # Building
    build_next_to_own: float = 2.0  # Per own worker adjacent to the build
    dome_opponent_win: float = 50.0  # Capping a level-3 cell an opponent could reach
    gift_opponent_climb: float = -8.0  # Building level 3 next to an opponent


@dataclass
class MoveEvaluation:
    """Result of evaluating one move."""
    move: Move
    score: float
    feature_breakdown: dict[str, float] = field(default_factory=dict)


def _adjacent(a: Position, b: Position) -> bool:
    return a != b and abs(a.x - b.x) <= 1 and abs(a.y - b.y) <= 1


class HeuristicEvaluator:
    """
    Evaluates moves using weighted heuristics on a Snapshot.

    Only reads the snapshot, so evaluation never touches a live session.
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(self, snapshot: Snapshot, player_id: str, move: Move) -> MoveEvaluation:
        if move.kind == MoveKind.MOVE:
            features = self._move_features(snapshot, move)
        elif move.kind == MoveKind.BUILD:
            features = self._build_features(snapshot, player_id, move)
        else:
            features = {}
        return MoveEvaluation(move=move, score=sum(features.values()), feature_breakdown=features)

    def rank(self, snapshot: Snapshot, player_id: str, moves: list[Move]) -> list[MoveEvaluation]:
        """Evaluate all moves, best first. Ties keep the input order."""
        evaluations = [self.evaluate(snapshot, player_id, m) for m in moves]
        return sorted(evaluations, key=lambda e: e.score, reverse=True)

    def _move_features(self, snapshot: Snapshot, move: Move) -> dict[str, float]:
        origin = snapshot.height_at(move.from_pos)
        target = snapshot.height_at(move.to)
        features = {
            "height_gain": self.weights.height_gain * (target - origin),
            "target_height": self.weights.target_height * target,
        }
        if target == WIN_HEIGHT:
            features["winning_move"] = self.weights.winning_move
        return features

    def _build_features(self, snapshot: Snapshot, player_id: str, move: Move) -> dict[str, float]:
        new_height = snapshot.height_at(move.at) + 1
        own, opponents = [], []
        for player in snapshot.players:
            positions = [pos for _, pos in player.workers]
            (own if player.player_id == player_id else opponents).extend(positions)

        features = {
            "build_next_to_own": self.weights.build_next_to_own
            * sum(1 for pos in own if _adjacent(pos, move.at)),
        }
        threatening = [
            pos for pos in opponents
            if _adjacent(pos, move.at) and snapshot.height_at(pos) >= WIN_HEIGHT - 1
        ]
        if threatening and new_height == MAX_HEIGHT:
            features["dome_opponent_win"] = self.weights.dome_opponent_win
        elif threatening and new_height == WIN_HEIGHT:
            features["gift_opponent_climb"] = self.weights.gift_opponent_climb
        return features
