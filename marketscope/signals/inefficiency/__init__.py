"""
Inefficiency signals: momentum, mean reversion and pair divergence.
"""

from .types import InefficiencyConfig, InefficiencyReport
from .detector import InefficiencyDetector

__all__ = [
    "InefficiencyConfig",
    "InefficiencyReport",
    "InefficiencyDetector",
]
