"""Rule-driven derivation of new tasks.

For a task in focus, every rule is tried in turn:

1. Unify the focus term with the rule's first premise.
2. Sample candidate beliefs from the other concepts in memory.
3. Search for every assignment of candidates to the remaining premises
   that is consistent with the bindings so far (depth first, over an
   explicit stack).
4. Substitute the bindings into the conclusion and compute its truth
   from the premise truths, focus first.

Two caps keep the search bounded on large memories: ``max_candidates``
limits the beliefs considered per focus (the highest-priority ones win),
and ``max_combinations`` limits complete matches per rule.

Premises whose stamps overlap are never combined, so a conclusion cannot
be supported by the same evidence twice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from .bag import Bag
from .budget import BudgetPolicy, DefaultBudgetPolicy
from .rule import Rule
from .task import ETERNAL, IdGenerator, Task, TaskBuilder
from .term import Term, VarKind
from .truth_functions import apply_truth_function
from .unification import Bindings, match, substitute

if TYPE_CHECKING:
    from .memory import Memory

__all__ = ["Deriver", "Premises"]

logger = logging.getLogger(__name__)


@dataclass
class Premises:
    """A complete match of one rule's premises.

    Attributes:
        rule: The matched rule
        bindings: Pattern variable bindings
        tasks: Matched tasks in premise order, focus first
    """

    rule: Rule
    bindings: Bindings
    tasks: tuple[Task, ...]

    @property
    def evidence(self) -> frozenset[int]:
        """Union of every premise's evidence trail and id."""
        stamp: frozenset[int] = frozenset()
        for task in self.tasks:
            stamp |= task.stamp
        return stamp


class Deriver:
    """Applies rules to a focus task and the beliefs in memory.

    Args:
        rules: Rules to apply, tried in order
        ids: Id source for derived tasks, shared with whoever mints input
            task ids so derived ids never collide with them
        budget: Budget policy assigning derived priorities
        max_candidates: Beliefs considered per focus
        max_combinations: Complete premise matches kept per rule
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        ids: IdGenerator,
        budget: BudgetPolicy | None = None,
        max_candidates: int = 64,
        max_combinations: int = 256,
    ) -> None:
        self.rules = list(rules)
        self.budget = budget or DefaultBudgetPolicy()
        if ids is None:
            raise ValueError("Deriver needs the controller's IdGenerator")
        self.ids = ids
        self.max_candidates = max_candidates
        self.max_combinations = max_combinations
        self.derivation_count = 0

    def derive(
        self,
        focus: Task,
        memory: Memory,
        now: int = 0,
        deadline: float | None = None,
    ) -> list[Task]:
        """Derive new tasks from a focus task.

        Args:
            focus: Task being reacted to
            memory: Concept store supplying candidate beliefs
            now: Current logical time, stamped as creation time
            deadline: ``time.monotonic()`` value after which remaining rules
                and premise searches are skipped

        Returns:
            Derived tasks, in rule order
        """
        if focus.truth is None:
            return []

        candidates: list[Task] | None = None
        derived: list[Task] = []
        for rule in self.rules:
            if deadline is not None and time.monotonic() > deadline:
                logger.debug(f"Deadline reached before rule {rule.name}")
                break
            bindings = match(rule.premises[0], focus.term)
            if bindings is None:
                continue
            if candidates is None and len(rule.premises) > 1:
                candidates = self.sample_candidates(focus, memory)

            for premises in self.match_premises(rule, focus, bindings, candidates or [], deadline):
                task = self.conclude(premises, now)
                if task is not None:
                    derived.append(task)

        self.derivation_count += len(derived)
        if derived:
            logger.debug(f"Derived {len(derived)} tasks from focus {focus}")
        return derived

    def sample_candidates(self, focus: Task, memory: Memory) -> list[Task]:
        """Highest-priority beliefs outside the focus concept, best first."""
        bag: Bag[Task] = Bag(self.max_candidates)
        for belief in memory.beliefs(exclude=focus.term):
            bag.add(belief)
        candidates = []
        while len(bag):
            candidates.append(bag.take())
        return candidates

    def match_premises(
        self,
        rule: Rule,
        focus: Task,
        bindings: Bindings,
        candidates: list[Task],
        deadline: float | None = None,
    ) -> list[Premises]:
        """Find every consistent assignment of candidates to ``rule.premises[1:]``.

        Args:
            rule: Rule whose first premise already matched the focus
            focus: The focus task
            bindings: Bindings from matching the first premise
            candidates: Beliefs to try, best first
            deadline: ``time.monotonic()`` value that stops the search early

        Returns:
            Complete matches, at most ``max_combinations`` of them
        """
        results: list[Premises] = []
        stack: list[tuple[int, Bindings, tuple[Task, ...]]] = [(1, bindings, (focus,))]

        while stack and len(results) < self.max_combinations:
            if deadline is not None and time.monotonic() > deadline:
                logger.debug(f"Deadline reached while matching rule {rule.name}")
                break
            index, current, matched = stack.pop()
            if index == len(rule.premises):
                results.append(Premises(rule, current, matched))
                continue

            pattern = rule.premises[index]
            # Reversed so the best candidate is popped first
            for candidate in reversed(candidates):
                if any(candidate.overlaps(task) for task in matched):
                    continue
                extended = match(pattern, candidate.term, current)
                if extended is not None:
                    stack.append((index + 1, extended, matched + (candidate,)))

        if stack and len(results) >= self.max_combinations:
            logger.debug(f"Rule {rule.name} hit the combination cap ({self.max_combinations})")
        return results

    def conclude(self, premises: Premises, now: int = 0) -> Task | None:
        """Build the conclusion task for a complete match.

        Returns:
            The derived task, or None if the conclusion is not a usable term
        """
        rule = premises.rule
        term: Term = substitute(rule.conclusion, premises.bindings)

        if term.has_variables(VarKind.PATTERN):
            logger.debug(f"Rule {rule.name} left unbound variables in {term}")
            return None
        if term.is_reflexive:
            return None
        if any(term == task.term for task in premises.tasks):
            return None

        truth = None
        if rule.punctuation.has_truth:
            truth = apply_truth_function(rule.function, [t.truth for t in premises.tasks])

        task = (
            TaskBuilder(self.ids)
            .term(term)
            .punctuation(rule.punctuation)
            .truth(truth)
            .time(ETERNAL)
            .evidence(premises.evidence)
            .creation_time(now)
            .build()
        )
        task.budget.priority = self.budget.priority_for_derived(task, self)
        return task
