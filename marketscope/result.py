"""
Result values for analytics operations.

Component entry points return an AnalysisResult holding either a value or
an AnalysisError. Batch operations return one result per item so a failing
item keeps its slot instead of aborting the batch.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from marketscope.exceptions import EXCEPTIONS_BY_KIND, ErrorKind, MarketAnalyticsError

T = TypeVar("T")


@dataclass(frozen=True)
class AnalysisError:
    """Why an item could not be computed."""
    kind: ErrorKind
    message: str
    key: Optional[str] = None

    def to_exception(self) -> MarketAnalyticsError:
        return EXCEPTIONS_BY_KIND[self.kind](self.message, key=self.key)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "key": self.key}


@dataclass(frozen=True)
class AnalysisResult(Generic[T]):
    """Either a computed value or an error, tagged with an optional item key."""
    value: Optional[T] = None
    error: Optional[AnalysisError] = None
    key: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, key: Optional[str] = None) -> "AnalysisResult[T]":
        return cls(value=value, key=key)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        key: Optional[str] = None
    ) -> "AnalysisResult[T]":
        return cls(error=AnalysisError(kind=kind, message=message, key=key), key=key)

    @classmethod
    def from_exception(
        cls,
        exc: MarketAnalyticsError,
        key: Optional[str] = None
    ) -> "AnalysisResult[T]":
        return cls.failure(exc.kind, exc.message, key=key if key is not None else exc.key)

    def unwrap(self) -> T:
        """Return the value or raise the exception matching the error kind."""
        if self.error is not None:
            raise self.error.to_exception()
        return self.value
