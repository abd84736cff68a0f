"""
Execution cost simulation for strategy legs.
"""
from .types import DepthSource, ExecutionConfig, ExecutionEstimate, FILL_TOLERANCE
from .synthetic import build_synthetic_depth
from .fill_simulator import ExecutionSimulator

__all__ = [
    "DepthSource",
    "ExecutionConfig",
    "ExecutionEstimate",
    "FILL_TOLERANCE",
    "build_synthetic_depth",
    "ExecutionSimulator",
]
