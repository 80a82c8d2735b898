"""Concepts: the knowledge hub for a single term.

A concept collects every task about its term in four tables (beliefs,
goals, questions, quests), keeps non-owning links to related terms and
tasks, and carries an activation level used for attention and eviction.

Links are plain keys (terms and task ids) resolved through Memory, never
references to other concepts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .task import Punctuation, Task
from .term import Term
from .truth import Truth
from .table import TaskTable

__all__ = ["Concept", "LinkingParams"]

logger = logging.getLogger(__name__)


@dataclass
class LinkingParams:
    """Caps on the number of links a concept keeps."""

    max_term_links: int = 10
    max_task_links: int = 10


class Concept:
    """Everything the reasoner knows about one term.

    Args:
        term: The concept's term
        table_capacity: Capacity of each of the four task tables
        links: Link caps
    """

    def __init__(
        self,
        term: Term,
        table_capacity: int = 100,
        links: LinkingParams | None = None,
    ) -> None:
        self.term = term
        self.table_capacity = table_capacity
        self.links = links or LinkingParams()
        self.beliefs = TaskTable(table_capacity)
        self.goals = TaskTable(table_capacity)
        self.questions = TaskTable(table_capacity)
        self.quests = TaskTable(table_capacity)
        self.term_links: set[Term] = set()
        self.task_links: set[int] = set()
        self._activation = 0.0

    def __repr__(self) -> str:
        return (
            f"Concept({self.term}, activation={self._activation:.3f}, "
            f"beliefs={len(self.beliefs)}, goals={len(self.goals)})"
        )

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    @property
    def activation(self) -> float:
        return self._activation

    def set_activation(self, value: float) -> None:
        self._activation = min(1.0, max(0.0, value))

    def increase_activation(self, amount: float) -> None:
        """Raise activation, capped at 1."""
        self.set_activation(self._activation + amount)

    def decay_activation(self, rate: float) -> None:
        """Multiply activation by ``1 - rate``, flooring at 0."""
        self.set_activation(self._activation * (1.0 - rate))

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def table(self, punctuation: Punctuation) -> TaskTable | None:
        """Table holding tasks of a punctuation; None for commands."""
        return {
            Punctuation.BELIEF: self.beliefs,
            Punctuation.GOAL: self.goals,
            Punctuation.QUESTION: self.questions,
            Punctuation.QUEST: self.quests,
        }.get(punctuation)

    def add_task(self, task: Task) -> bool:
        """Route a task to its table.

        Returns:
            True if the table admitted the task. Commands are not stored.
        """
        table = self.table(task.punctuation)
        if table is None:
            logger.warning(f"Ignoring command task {task.id} for concept {self.term}")
            return False
        return table.add(task)

    def best_belief(self, start: int | None = None, end: int | None = None) -> Task | None:
        return self.beliefs.highest_priority(start, end)

    def best_goal(self, start: int | None = None, end: int | None = None) -> Task | None:
        return self.goals.highest_priority(start, end)

    def belief_truth(self, start: int | None = None, end: int | None = None) -> Truth | None:
        return self.beliefs.truth(start, end)

    def goal_truth(self, start: int | None = None, end: int | None = None) -> Truth | None:
        return self.goals.truth(start, end)

    def tasks(
        self,
        beliefs: bool = True,
        goals: bool = True,
        questions: bool = True,
        quests: bool = True,
    ) -> list[Task]:
        """Collect tasks from the selected tables."""
        selected = []
        if beliefs:
            selected.extend(self.beliefs)
        if goals:
            selected.extend(self.goals)
        if questions:
            selected.extend(self.questions)
        if quests:
            selected.extend(self.quests)
        return selected

    def task_count(self) -> int:
        return len(self.beliefs) + len(self.goals) + len(self.questions) + len(self.quests)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def add_term_link(self, term: Term) -> bool:
        """Link a related term; duplicates and self links are ignored.

        Returns:
            True if the link is new and within the cap
        """
        if term == self.term or term in self.term_links:
            return False
        if len(self.term_links) >= self.links.max_term_links:
            return False
        self.term_links.add(term)
        return True

    def add_task_link(self, task_id: int) -> bool:
        if task_id in self.task_links:
            return False
        if len(self.task_links) >= self.links.max_task_links:
            return False
        self.task_links.add(task_id)
        return True

    def copy(self) -> Concept:
        """Independent snapshot: tables, links and activation are copied."""
        clone = Concept(self.term, self.table_capacity, self.links)
        clone.beliefs = self.beliefs.copy()
        clone.goals = self.goals.copy()
        clone.questions = self.questions.copy()
        clone.quests = self.quests.copy()
        clone.term_links = set(self.term_links)
        clone.task_links = set(self.task_links)
        clone._activation = self._activation
        return clone
