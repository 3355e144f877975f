"""
Progress snapshot value type.

A snapshot is a plain read of completed/total step counts. It does not
discern between continuous or discrete progress.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ProgressSnapshot:
    """
    Completed and total step counts for one task.

    ``total`` is never allowed below ``completed`` (nor below 1), so
    ``ratio`` can never exceed 1.0 or divide by zero. Assigning either
    field re-applies the clamp.
    """

    completed: int = 0
    total: int = 1

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name in ("completed", "total") and "total" in self.__dict__:
            floor = max(self.completed, 1)
            if self.total < floor:
                super().__setattr__("total", floor)

    @property
    def ratio(self) -> float:
        """Current fraction towards completion from 0.0 to 1.0."""
        return self.completed / self.total

    @property
    def percent(self) -> float:
        """Progress as percentage."""
        return self.ratio * 100

    @property
    def remaining(self) -> int:
        """Steps still expected before completion."""
        return self.total - self.completed

    @property
    def is_complete(self) -> bool:
        return self.completed >= self.total
