"""
Hedge structures and their projections.
"""

from .types import StrategyConfig, HedgeSuggestion
from .builder import HedgeStrategyBuilder
from .payoff import PayoffProjector

__all__ = [
    "StrategyConfig",
    "HedgeSuggestion",
    "HedgeStrategyBuilder",
    "PayoffProjector",
]
