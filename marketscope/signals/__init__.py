"""
Signals module for inefficiency detection and cross-market consistency checks.
"""
from .inefficiency import (
    InefficiencyConfig,
    InefficiencyReport,
    InefficiencyDetector,
)
from .consistency import (
    ConsistencyConfig,
    ConsistencyScanner,
)

__all__ = [
    # Inefficiency
    "InefficiencyConfig",
    "InefficiencyReport",
    "InefficiencyDetector",

    # Consistency
    "ConsistencyConfig",
    "ConsistencyScanner",
]
