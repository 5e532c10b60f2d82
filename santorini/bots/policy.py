"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a snapshot and the legal moves of the player to act and
returns a decision. Bots are ordinary clients: they only see snapshots and
submit moves through the same path as humans.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
import random

from ..engine_core.game import Snapshot
from ..engine_core.move import Move
from .evaluator import HeuristicEvaluator, EvaluationWeights


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The move to play
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    move: Move
    explanation: str = ""
    confidence: float = 1.0

    # Evaluation details (for debugging)
    evaluated_moves: int = 0
    best_score: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects moves. Implementations can range from
    simple heuristics to search.
    """

    @abstractmethod
    def select_move(self, snapshot: Snapshot, legal_moves: list[Move]) -> BotDecision:
        """
        Select a move from the legal moves.

        Args:
            snapshot: Current session snapshot (current_player_id is the bot)
            legal_moves: Non-empty list of legal moves

        Returns:
            BotDecision with the selected move
        """

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects moves uniformly at random.

    Seeded for reproducible self-play.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_move(self, snapshot: Snapshot, legal_moves: list[Move]) -> BotDecision:
        if not legal_moves:
            raise ValueError("No legal moves available")

        move = self.rng.choice(legal_moves)
        return BotDecision(
            move=move,
            explanation="Selected randomly",
            confidence=1.0 / len(legal_moves),
            evaluated_moves=len(legal_moves),
        )


class FirstLegalPolicy(BotPolicy):
    """First-legal policy - always selects the first legal move. Deterministic."""

    def select_move(self, snapshot: Snapshot, legal_moves: list[Move]) -> BotDecision:
        if not legal_moves:
            raise ValueError("No legal moves available")

        return BotDecision(
            move=legal_moves[0],
            explanation="Selected first legal move",
            evaluated_moves=1,
        )


class ClimbFirstPolicy(BotPolicy):
    """
    Greedy one-ply policy.

    Takes a winning climb when one exists, otherwise the highest scoring move
    under HeuristicEvaluator. Placements fall back to the seeded rng.
    """

    def __init__(self, weights: EvaluationWeights | None = None, seed: int | None = None):
        self.evaluator = HeuristicEvaluator(weights)
        self.rng = random.Random(seed)

    def select_move(self, snapshot: Snapshot, legal_moves: list[Move]) -> BotDecision:
        if not legal_moves:
            raise ValueError("No legal moves available")

        ranked = self.evaluator.rank(snapshot, snapshot.current_player_id, legal_moves)
        best_score = ranked[0].score
        best = [e for e in ranked if e.score == best_score]
        choice = self.rng.choice(best)
        return BotDecision(
            move=choice.move,
            explanation=f"Best heuristic score {best_score:.1f} among {len(best)} tied",
            confidence=1.0 / len(best),
            evaluated_moves=len(ranked),
            best_score=best_score,
            evaluation_details=choice.feature_breakdown,
        )


POLICIES = {
    "random": RandomPolicy,
    "first": FirstLegalPolicy,
    "climb": ClimbFirstPolicy,
}


def create_policy(name: str, seed: int | None = None) -> BotPolicy:
    """Build a policy by name ("random", "first", "climb")."""
    if name not in POLICIES:
        raise ValueError(f"Unknown policy {name!r}; choose from {sorted(POLICIES)}")
    if name == "first":
        return FirstLegalPolicy()
    return POLICIES[name](seed=seed)
