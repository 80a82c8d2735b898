"""Pluggable budget policies.

A budget policy decides how much attention a task receives:

- priority_for_input: activation gained by a concept when a task is input
- priority_for_derived: priority given to a freshly derived task

Usage:
    from narcore.budget import get_budget_policy

    policy = get_budget_policy("default")
    task.budget.priority = policy.priority_for_derived(task, deriver)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .task import Punctuation, Task

if TYPE_CHECKING:
    from .concept import Concept

__all__ = [
    "BudgetPolicy",
    "DefaultBudgetPolicy",
    "BUDGET_POLICIES",
    "get_budget_policy",
]


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class BudgetPolicy(ABC):
    """Abstract base for budget policies."""

    @abstractmethod
    def priority_for_input(self, task: Task, focus: Concept | None = None) -> float:
        """Activation gain for the concept receiving an input task.

        Args:
            task: The input task
            focus: Concept the task is stored in, if known

        Returns:
            Gain in [0, 1]
        """

    @abstractmethod
    def priority_for_derived(self, task: Task, deriver: Any = None) -> float:
        """Priority of a derived task.

        Args:
            task: The derived task
            deriver: The deriver that produced it

        Returns:
            Priority in [0, 1]
        """


class DefaultBudgetPolicy(BudgetPolicy):
    """Constant discounts.

    Input gain is ``input_activation * task priority``. Derived tasks get a
    fixed factor per punctuation; commands get 1.0.
    """

    def __init__(
        self,
        belief: float = 0.9,
        goal: float = 0.9,
        question: float = 0.9,
        quest: float = 0.9,
        input_activation: float = 1.0,
    ) -> None:
        self.input_activation = input_activation
        self.derived_factors = {
            Punctuation.BELIEF: belief,
            Punctuation.GOAL: goal,
            Punctuation.QUESTION: question,
            Punctuation.QUEST: quest,
        }

    def priority_for_input(self, task: Task, focus: Concept | None = None) -> float:
        return _clamp(self.input_activation * task.priority)

    def priority_for_derived(self, task: Task, deriver: Any = None) -> float:
        return _clamp(self.derived_factors.get(task.punctuation, 1.0))


BUDGET_POLICIES: dict[str, type[BudgetPolicy]] = {
    "default": DefaultBudgetPolicy,
}


def get_budget_policy(name: str = "default") -> BudgetPolicy:
    """Get a budget policy by name.

    Args:
        name: Policy name ("default")

    Returns:
        A new policy instance

    Raises:
        KeyError: If the policy name is unknown
    """
    if name not in BUDGET_POLICIES:
        raise KeyError(f"Unknown budget policy: {name}. Valid: {list(BUDGET_POLICIES.keys())}")
    return BUDGET_POLICIES[name]()
