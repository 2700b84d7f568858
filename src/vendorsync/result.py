"""Uniform result envelope returned by every backend operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Why an operation failed."""

    TRANSPORT = "transport"  # network, HTTP status, malformed payload, storage I/O
    NOT_FOUND = "not_found"  # update/delete target missing
    INVALID = "invalid"  # rejected before reaching a backend
    BUSY = "busy"  # another mutation already in flight


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success flag plus optional payload or human-readable error."""

    success: bool
    data: T | None = None
    error: str | None = None
    kind: FailureKind | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> OperationResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls, error: str, kind: FailureKind = FailureKind.TRANSPORT
    ) -> OperationResult[T]:
        return cls(success=False, error=error, kind=kind)

    @property
    def not_found(self) -> bool:
        return self.kind is FailureKind.NOT_FOUND
