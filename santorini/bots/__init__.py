"""
Bots module - Automated players.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy, FirstLegalPolicy, ClimbFirstPolicy: Concrete policies
- HeuristicEvaluator: Scores candidate moves
"""

from .policy import (
    BotPolicy,
    BotDecision,
    RandomPolicy,
    FirstLegalPolicy,
    ClimbFirstPolicy,
    POLICIES,
    create_policy,
)
from .evaluator import HeuristicEvaluator, EvaluationWeights, MoveEvaluation

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "ClimbFirstPolicy",
    "POLICIES",
    "create_policy",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "MoveEvaluation",
]
