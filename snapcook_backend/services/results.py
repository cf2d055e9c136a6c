"""Result container for operations that degrade instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class FailSoft(Generic[T]):
    """A usable value plus the reason it was degraded, if it was."""

    value: T
    diagnostic: str | None = None

    @property
    def degraded(self) -> bool:
        return self.diagnostic is not None
