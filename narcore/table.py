"""Bounded per-punctuation task storage for one concept.

Admission follows a strict priority rule: while under capacity every task
is accepted; once full, a new task is accepted only if its priority is
strictly greater than the current minimum, which it then evicts.
"""

from __future__ import annotations

import logging
from typing import Iterator

from .task import Task, in_time_range
from .truth import Truth

__all__ = ["TaskTable"]

logger = logging.getLogger(__name__)


class TaskTable:
    """Bounded map from task id to task.

    Args:
        capacity: Maximum number of tasks held (at least 1)
    """

    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError(f"Table capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._tasks: dict[int, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._tasks

    def is_full(self) -> bool:
        return len(self._tasks) >= self.capacity

    def add(self, task: Task) -> bool:
        """Admit a task under the priority rule.

        A task whose id is already present replaces the stored one.

        Args:
            task: Task to admit

        Returns:
            True if the task was stored
        """
        if task.id in self._tasks or not self.is_full():
            self._tasks[task.id] = task
            return True

        weakest = self.lowest_priority()
        if weakest is None or task.priority <= weakest.priority:
            return False

        del self._tasks[weakest.id]
        self._tasks[task.id] = task
        logger.debug(f"Table evicted task {weakest.id} for task {task.id}")
        assert len(self._tasks) <= self.capacity, "table exceeded its capacity"
        return True

    def get(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def remove(self, task_id: int) -> Task | None:
        return self._tasks.pop(task_id, None)

    def clear(self) -> None:
        self._tasks.clear()

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def highest_priority(self, start: int | None = None, end: int | None = None) -> Task | None:
        """Highest-priority task whose occurrence lies in [start, end].

        Ties go to the earliest stored task.
        """
        best: Task | None = None
        for task in self._tasks.values():
            if not in_time_range(task.time, start, end):
                continue
            if best is None or task.priority > best.priority:
                best = task
        return best

    def lowest_priority(self) -> Task | None:
        """Lowest-priority task; ties go to the earliest stored task."""
        worst: Task | None = None
        for task in self._tasks.values():
            if worst is None or task.priority < worst.priority:
                worst = task
        return worst

    def tasks_above_priority(self, threshold: float) -> list[Task]:
        return [t for t in self._tasks.values() if t.priority > threshold]

    def truth(self, start: int | None = None, end: int | None = None) -> Truth | None:
        """Truth of the highest-priority task in the time range."""
        best = self.highest_priority(start, end)
        return best.truth if best is not None else None

    def find_equivalent(self, task: Task) -> Task | None:
        """Find a stored task with the same term, time and evidence trail."""
        for stored in self._tasks.values():
            if (
                stored.term == task.term
                and stored.time == task.time
                and stored.evidence == task.evidence
            ):
                return stored
        return None

    def copy(self) -> TaskTable:
        """Shallow copy: a new table holding the same task objects."""
        clone = TaskTable(self.capacity)
        clone._tasks = dict(self._tasks)
        return clone
