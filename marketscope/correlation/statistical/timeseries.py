import pandas as pd
import numpy as np
from typing import Optional, Sequence, Tuple

from marketscope.exceptions import InvalidInputError
from marketscope.models import PricePoint

ALIGNMENT_MODES = ("exact", "nearest")

class TimeSeriesAligner:
    """
    Pairs up two price histories by timestamp.

    exact: keep points of A whose timestamp appears in B (first match in B).
    nearest: pair each point of A with the closest point of B within
    tolerance_seconds; unmatched points are dropped.
    Output is always in A's original order.
    """

    def __init__(self, mode: str = "exact", tolerance_seconds: float = 0.0):
        if mode not in ALIGNMENT_MODES:
            raise InvalidInputError(f"alignment mode must be one of {ALIGNMENT_MODES}, got {mode!r}")
        if tolerance_seconds < 0:
            raise InvalidInputError(f"alignment tolerance must be >= 0, got {tolerance_seconds}")
        self.mode = mode
        self.tolerance_seconds = tolerance_seconds

    def to_frame(self, history: Sequence[PricePoint]) -> pd.DataFrame:
        """
        History as a frame with timestamp/price columns and its original position.

        Timestamps are converted to UTC; naive ones are taken to be UTC already,
        so naive and timezone-aware histories can be aligned with each other.

        Raises:
            InvalidInputError: If a timestamp cannot be represented
        """
        try:
            timestamps = pd.to_datetime([p.timestamp for p in history], utc=True)
        except (ValueError, TypeError) as e:
            raise InvalidInputError(f"unusable price history timestamps: {e}") from e
        return pd.DataFrame({
            "timestamp": timestamps,
            "price": np.array([p.price for p in history], dtype=float),
            "position": np.arange(len(history)),
        })

    def to_series(self, history: Sequence[PricePoint]) -> pd.Series:
        """Convert a history to a timestamp-indexed price Series."""
        if not history:
            return pd.Series(dtype=float)
        frame = self.to_frame(history)
        return frame.set_index("timestamp")["price"]

    def align_frame(
        self,
        history_a: Sequence[PricePoint],
        history_b: Sequence[PricePoint]
    ) -> pd.DataFrame:
        """Aligned pairs as a frame with columns a and b, indexed by A's timestamps."""
        if not history_a or not history_b:
            return pd.DataFrame({"a": pd.Series(dtype=float), "b": pd.Series(dtype=float)})

        frame_a = self.to_frame(history_a)
        frame_b = self.to_frame(history_b)

        if self.mode == "exact":
            # Inner merge keeps the order of the left keys
            right = frame_b.drop_duplicates(subset="timestamp", keep="first")
            merged = frame_a.merge(
                right[["timestamp", "price"]],
                on="timestamp",
                how="inner",
                suffixes=("_a", "_b"),
            )
        else:
            left = frame_a.sort_values("timestamp", kind="stable")
            right = frame_b.sort_values("timestamp", kind="stable")
            merged = pd.merge_asof(
                left,
                right[["timestamp", "price"]],
                on="timestamp",
                direction="nearest",
                tolerance=pd.Timedelta(seconds=self.tolerance_seconds),
                suffixes=("_a", "_b"),
            )
            merged = merged.dropna(subset=["price_b"]).sort_values("position", kind="stable")

        aligned = pd.DataFrame({
            "a": merged["price_a"].to_numpy(dtype=float),
            "b": merged["price_b"].to_numpy(dtype=float),
        }, index=pd.DatetimeIndex(merged["timestamp"]))
        return aligned

    def align(
        self,
        history_a: Sequence[PricePoint],
        history_b: Sequence[PricePoint]
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Two equal-length price arrays for the matched timestamps."""
        aligned = self.align_frame(history_a, history_b)
        return aligned["a"].to_numpy(dtype=float), aligned["b"].to_numpy(dtype=float)

    def align_series(
        self,
        history_a: Sequence[PricePoint],
        history_b: Sequence[PricePoint]
    ) -> Tuple[pd.Series, pd.Series]:
        aligned = self.align_frame(history_a, history_b)
        return aligned["a"], aligned["b"]
