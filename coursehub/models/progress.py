from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


def completion_percent(completed: int, total: int) -> int:
    """``round(100 * completed / total)`` with halves rounded up; 0 when total is 0.

    Integer arithmetic, so 2/3 -> 67 and 1/8 -> 13 exactly.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


@dataclass(frozen=True, slots=True)
class Completion:
    """A learner finished one session.  The row's existence is the fact."""

    user_id: UUID
    session_id: UUID
    completed_at: int


@dataclass(frozen=True, slots=True)
class CourseProgress:
    """One learner's standing in one course."""

    completed: int
    total: int

    @property
    def percent(self) -> int:
        return completion_percent(self.completed, self.total)


@dataclass(frozen=True, slots=True)
class CompletionGrid:
    """Sessions x ACTIVE enrollees, each cell done or not."""

    completed_cells: int
    total_cells: int

    @property
    def percent(self) -> int:
        return completion_percent(self.completed_cells, self.total_cells)
