"""Result models for bulk trash operations."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ItemFailure(BaseModel):
    """A per-item failure recorded during a bulk operation.

    Attributes:
        target: Entry name or path that failed.
        message: Human-readable error description.
        error: Exception class name.
    """

    target: str
    message: str
    error: str


class BatchResult(BaseModel):
    """Outcome of a best-effort bulk operation.

    Attributes:
        operation: Name of the bulk operation.
        succeeded: Entry names (or paths) processed successfully.
        failures: Items that failed, in processing order.
    """

    operation: str
    succeeded: List[str] = Field(default_factory=list)
    failures: List[ItemFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return whether every item succeeded."""
        return not self.failures

    def record_failure(self, target: str, exc: Exception) -> None:
        """Append a failure for ``target`` caused by ``exc``."""
        self.failures.append(ItemFailure(target=target, message=str(exc), error=type(exc).__name__))


class EmptyResult(BatchResult):
    """Outcome of emptying the trash.

    Attributes:
        strays_removed: Paths of unpaired files deleted in the second pass.
    """

    operation: str = "empty"
    strays_removed: List[str] = Field(default_factory=list)


__all__ = ["ItemFailure", "BatchResult", "EmptyResult"]
