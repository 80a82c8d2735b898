"""The reasoner: memory, deriver and clock driven by the reasoning cycle.

Each cycle:

1. Advances the clock and decays every concept's activation.
2. Draws the ``working_set_size`` most active concepts through a bag.
3. Takes each drawn concept's best belief and best goal as focus tasks.
4. Derives from each focus and stores the results, boosting the
   activation of the concepts that receive them.
5. Occasionally also visits one concept chosen uniformly at random, so
   low-activation concepts are never starved entirely.

Example:
    nar = NAR()
    nar.input(nar.task(inh(atom("robin"), atom("bird"))))
    nar.input(nar.task(inh(atom("bird"), atom("animal"))))
    nar.run(1)
    nar.belief(inh(atom("robin"), atom("animal")))  # Truth(1.0, 0.81)
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from .bag import Bag
from .budget import BudgetPolicy, DefaultBudgetPolicy
from .clock import Clock
from .concept import Concept, LinkingParams
from .config import ReasonerConfig
from .deriver import Deriver
from .memory import Memory
from .rule import Rule, nal_rules
from .task import ETERNAL, Budget, IdGenerator, Punctuation, Task, TaskBuilder, Time
from .term import Term
from .truth import Truth

__all__ = ["NAR", "NARStats", "AnswerListener"]

logger = logging.getLogger(__name__)

# Called with (question, answer) when a question or quest meets a judgment
AnswerListener = Callable[[Task, Task], None]


@dataclass
class NARStats:
    """Snapshot of reasoner state.

    Attributes:
        time: Current logical time
        concept_count: Concepts in memory
        active_concept_count: Concepts above the active threshold
        derived_count: Tasks derived since construction
    """

    time: int
    concept_count: int
    active_concept_count: int
    derived_count: int = 0


class NAR:
    """Non-axiomatic reasoner.

    Args:
        config: Tunables; defaults to ``ReasonerConfig()``
        rules: Inference rules; defaults to ``nal_rules()``
        budget: Budget policy; defaults to ``DefaultBudgetPolicy()``
    """

    def __init__(
        self,
        config: ReasonerConfig | None = None,
        rules: Iterable[Rule] | None = None,
        budget: BudgetPolicy | None = None,
    ) -> None:
        self.config = config or ReasonerConfig()
        self.ids = IdGenerator()
        self.clock = Clock()
        self.budget = budget or DefaultBudgetPolicy()
        self.memory = Memory(
            capacity=self.config.memory_capacity,
            table_capacity=self.config.table_capacity,
            min_activation=self.config.min_activation,
            links=LinkingParams(
                max_term_links=self.config.max_term_links,
                max_task_links=self.config.max_task_links,
            ),
        )
        self.deriver = Deriver(
            rules if rules is not None else nal_rules(),
            ids=self.ids,
            budget=self.budget,
            max_candidates=self.config.max_candidates,
            max_combinations=self.config.max_combinations,
        )
        self._random = random.Random(self.config.seed)
        self._running = False
        self._answer_listeners: list[AnswerListener] = []
        self._answered: set[tuple[int, int]] = set()
        self._deadline: float | None = None
        self._out_of_time = False

    @property
    def time(self) -> int:
        return self.clock.now

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def task(
        self,
        term: Term,
        punctuation: Punctuation = Punctuation.BELIEF,
        truth: Truth | None = None,
        budget: Budget | None = None,
        time: Time = ETERNAL,
    ) -> Task:
        """Build an input task with the next id and the current time.

        Beliefs, goals and commands without an explicit truth get the
        default (1.0, 0.9).
        """
        if truth is None and punctuation.has_truth:
            truth = Truth.default_goal() if punctuation is Punctuation.GOAL else Truth.default_belief()
        builder = (
            TaskBuilder(self.ids)
            .term(term)
            .punctuation(punctuation)
            .time(time)
            .creation_time(self.clock.now)
        )
        if truth is not None:
            builder.truth(truth)
        if budget is not None:
            builder.budget(budget)
        return builder.build()

    def input(self, task: Task) -> bool:
        """Admit a task into the concept for its term.

        The concept is created if absent and its activation grows by the
        budget policy's input priority.

        Returns:
            True if the concept's table admitted the task
        """
        with self.memory.access(task.term, create=True) as concept:
            admitted = concept.add_task(task)
            concept.increase_activation(self.budget.priority_for_input(task, concept))
        self.memory.link(task)
        logger.debug(f"Input {task} (admitted={admitted})")
        return admitted

    def conceptualize(self, term: Term) -> Concept:
        """Ensure a concept exists for a term and return a copy of it."""
        return self.memory.get_or_create(term)

    def concept(self, term: Term) -> Concept | None:
        return self.memory.get(term)

    def on_answer(self, listener: AnswerListener) -> None:
        """Register a callback for answers to stored questions and quests."""
        self._answer_listeners.append(listener)

    # ------------------------------------------------------------------
    # Reasoning cycle
    # ------------------------------------------------------------------

    def cycle(self) -> int:
        """Run one reasoning cycle.

        Returns:
            Number of derived tasks stored this cycle
        """
        now = self.clock.next()
        self.memory.decay_activation(self.config.decay_rate)

        budget = self.config.cycle_time_budget
        self._deadline = time.monotonic() + budget if budget is not None else None
        self._out_of_time = False

        bag: Bag[tuple[Term, float]] = Bag(self.config.working_set_size, priority=lambda e: e[1])
        for entry in self.memory.activations():
            bag.add(entry)
        drawn: list[Term] = []
        while len(bag):
            drawn.append(bag.take()[0])

        stored = 0
        for term in drawn:
            stored += self._process(term, now)

        if len(self.memory) and self._random.random() < self.config.random_visit_probability:
            visited = self._random.choice(self.memory.terms())
            logger.debug(f"Cycle {now}: random visit to {visited}")
            stored += self._process(visited, now)
            drawn.append(visited)

        self._answer_questions(drawn)
        logger.debug(f"Cycle {now}: visited {len(drawn)} concepts, stored {stored} derived tasks")
        return stored

    def run(self, cycles: int) -> int:
        """Run up to ``cycles`` cycles, stopping early if ``stop()`` is called.

        Returns:
            Number of cycles completed
        """
        self._running = True
        completed = 0
        try:
            for _ in range(cycles):
                if not self._running:
                    break
                self.cycle()
                completed += 1
        finally:
            self._running = False
        return completed

    def stop(self) -> None:
        self._running = False

    def reset(self, clear_memory: bool = True) -> None:
        """Stop and rewind the clock, optionally emptying memory.

        Task ids restart only together with memory, so stored tasks never
        share an id with new ones.
        """
        self.stop()
        self.clock.reset()
        self._answered.clear()
        self._random = random.Random(self.config.seed)
        if clear_memory:
            self.memory.clear()
            self.ids.reset()
        logger.debug(f"Reset reasoner (clear_memory={clear_memory})")

    def forget(self) -> int:
        """Drop concepts below the minimum activation."""
        return self.memory.forget()

    def _process(self, term: Term, now: int) -> int:
        with self.memory.access(term) as concept:
            if concept is None:
                return 0
            foci = [t for t in (concept.best_belief(), concept.best_goal()) if t is not None]

        stored = 0
        for focus in foci:
            if self._deadline is not None and time.monotonic() > self._deadline:
                if not self._out_of_time:
                    logger.warning(f"Cycle {now} exceeded its time budget; skipping remaining foci")
                    self._out_of_time = True
                break
            for derived in self.deriver.derive(focus, self.memory, now, self._deadline):
                if self._store_derived(derived):
                    stored += 1
        return stored

    def _store_derived(self, task: Task) -> bool:
        with self.memory.access(task.term, create=True) as concept:
            table = concept.table(task.punctuation)
            if table is not None and table.find_equivalent(task) is not None:
                return False
            admitted = concept.add_task(task)
            concept.increase_activation(self.config.activation_gain)
        if admitted:
            self.memory.link(task)
        return admitted

    def _answer_questions(self, terms: Iterable[Term]) -> None:
        if not self._answer_listeners:
            return
        pairs: list[tuple[Task, Task]] = []
        for term in terms:
            with self.memory.access(term) as concept:
                if concept is None:
                    continue
                belief = concept.best_belief()
                goal = concept.best_goal()
                if belief is not None:
                    pairs.extend((q, belief) for q in concept.questions)
                if goal is not None:
                    pairs.extend((q, goal) for q in concept.quests)

        for question, answer in pairs:
            key = (question.id, answer.id)
            if key in self._answered:
                continue
            self._answered.add(key)
            logger.info(f"Answer {answer} for {question}")
            for listener in self._answer_listeners:
                listener(question, answer)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def belief(self, term: Term, start: int | None = None, end: int | None = None) -> Truth | None:
        """Truth of the highest-priority belief about a term in the time range."""
        with self.memory.access(term) as concept:
            return concept.belief_truth(start, end) if concept is not None else None

    def goal(self, term: Term, start: int | None = None, end: int | None = None) -> Truth | None:
        """Truth of the highest-priority goal about a term in the time range."""
        with self.memory.access(term) as concept:
            return concept.goal_truth(start, end) if concept is not None else None

    def answer(
        self,
        term: Term,
        punctuation: Punctuation,
        start: int | None = None,
        end: int | None = None,
    ) -> Task | None:
        """Highest-priority task of one punctuation about a term."""
        with self.memory.access(term) as concept:
            if concept is None:
                return None
            table = concept.table(punctuation)
            return table.highest_priority(start, end) if table is not None else None

    def stats(self) -> NARStats:
        return NARStats(
            time=self.clock.now,
            concept_count=len(self.memory),
            active_concept_count=self.memory.count_active(self.config.active_threshold),
            derived_count=self.deriver.derivation_count,
        )
