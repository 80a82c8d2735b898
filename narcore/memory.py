"""Bounded concept store with activation decay and batch eviction.

Memory exclusively owns its concepts. Readers get copies from ``get``,
``get_or_create`` and ``concepts``; writers either replace a whole concept
with ``add`` or mutate one in place inside an ``access`` block:

    with memory.access(term, create=True) as concept:
        concept.add_task(task)
        concept.increase_activation(0.1)

Whenever an insertion pushes the size above capacity, the overflow is
removed in one batch: concepts are sorted by activation ascending (oldest
first among equals) and exactly ``size - capacity`` are dropped. A
dropped concept is forgotten; referencing its term again creates a fresh
concept with activation 0.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .concept import Concept, LinkingParams
from .task import Task
from .term import Term, term_key

__all__ = ["Memory", "LinkingParams"]

logger = logging.getLogger(__name__)


class Memory:
    """Bounded map from term to concept.

    Args:
        capacity: Maximum number of concepts (at least 1)
        table_capacity: Capacity of each task table in new concepts
        min_activation: Concepts below this activation are dropped by ``forget``
        links: Link caps for new concepts
    """

    def __init__(
        self,
        capacity: int = 10000,
        table_capacity: int = 100,
        min_activation: float = 0.01,
        links: LinkingParams | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Memory capacity must be positive, got {capacity}")
        self._capacity = capacity
        self.table_capacity = table_capacity
        self.min_activation = min_activation
        self.links = links or LinkingParams()
        self._concepts: dict[Term, Concept] = {}
        # Sorted term list, rebuilt lazily after the key set changes
        self._ordered: list[Term] | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._concepts)

    def __contains__(self, term: Term) -> bool:
        return term in self._concepts

    def _new_concept(self, term: Term) -> Concept:
        return Concept(term, self.table_capacity, self.links)

    def _ordered_terms(self) -> list[Term]:
        if self._ordered is None:
            self._ordered = sorted(self._concepts, key=term_key)
        return self._ordered

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, term: Term) -> Concept | None:
        """Copy of the concept for a term, or None if absent."""
        concept = self._concepts.get(term)
        return concept.copy() if concept is not None else None

    def concepts(self) -> list[Concept]:
        """Copies of all concepts, ordered by term key."""
        return [self._concepts[t].copy() for t in self._ordered_terms()]

    def terms(self) -> list[Term]:
        """All stored terms, ordered by complexity then canonical text."""
        return list(self._ordered_terms())

    def beliefs(self, exclude: Term | None = None) -> Iterator[Task]:
        """Iterate belief tasks of every concept, optionally skipping one term.

        Concepts are visited in term key order.
        """
        for term in self._ordered_terms():
            if term == exclude:
                continue
            concept = self._concepts.get(term)
            if concept is not None:
                yield from concept.beliefs

    def activations(self) -> list[tuple[Term, float]]:
        """(term, activation) pairs in term key order."""
        return [(t, self._concepts[t].activation) for t in self._ordered_terms()]

    def active_concepts(self, threshold: float) -> list[Concept]:
        """Copies of concepts whose activation is strictly above ``threshold``."""
        return [c.copy() for c in self._concepts.values() if c.activation > threshold]

    def count_active(self, threshold: float) -> int:
        return sum(1 for c in self._concepts.values() if c.activation > threshold)

    def most_active(self, count: int) -> list[Concept]:
        """Copies of the ``count`` most active concepts, most active first."""
        ranked = sorted(self._concepts.values(), key=lambda c: c.activation, reverse=True)
        return [c.copy() for c in ranked[:count]]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def get_or_create(self, term: Term) -> Concept:
        """Copy of the concept for a term, creating an empty one if absent.

        The new concept starts at activation 0, so if memory was already full
        it is the first candidate for eviction.
        """
        concept = self._concepts.get(term)
        if concept is None:
            concept = self._new_concept(term)
            self._concepts[term] = concept
            self._ordered = None
            self._enforce_capacity()
        return concept.copy()

    def add(self, concept: Concept) -> None:
        """Insert a concept, replacing any existing concept for its term."""
        if concept.term not in self._concepts:
            self._ordered = None
        self._concepts[concept.term] = concept.copy()
        self._enforce_capacity()

    def remove(self, term: Term) -> Concept | None:
        removed = self._concepts.pop(term, None)
        if removed is not None:
            self._ordered = None
        return removed

    def clear(self) -> None:
        self._concepts.clear()
        self._ordered = None

    @contextmanager
    def access(self, term: Term, create: bool = False) -> Iterator[Concept | None]:
        """Scoped mutable access to a stored concept.

        Args:
            term: Concept term
            create: Create an empty concept if the term is absent

        Yields:
            The live concept, or None if absent and ``create`` is False.
            The reference must not be kept beyond the block.
        """
        concept = self._concepts.get(term)
        if concept is None and create:
            concept = self._new_concept(term)
            self._concepts[term] = concept
            self._ordered = None
        try:
            yield concept
        finally:
            self._enforce_capacity()

    def decay_activation(self, rate: float) -> None:
        """Multiply every concept's activation by ``1 - rate`` (floor 0)."""
        for concept in self._concepts.values():
            concept.decay_activation(rate)

    def forget(self) -> int:
        """Drop concepts whose activation is below ``min_activation``.

        Returns:
            Number of concepts dropped
        """
        stale = [t for t, c in self._concepts.items() if c.activation < self.min_activation]
        for term in stale:
            del self._concepts[term]
        if stale:
            self._ordered = None
            logger.debug(f"Forgot {len(stale)} concepts below activation {self.min_activation}")
        return len(stale)

    def link(self, task: Task) -> None:
        """Record links for a stored task.

        The task's concept gets a task link and term links to every
        non-variable component of its term (recursively). Component
        concepts already in memory get a term link back to the task's term.
        """
        concept = self._concepts.get(task.term)
        if concept is None:
            return
        concept.add_task_link(task.id)
        components = [t for t in task.term.walk() if t != task.term and not t.is_variable]
        for component in components:
            concept.add_term_link(component)
            other = self._concepts.get(component)
            if other is not None:
                other.add_term_link(task.term)

    def _enforce_capacity(self) -> None:
        overflow = len(self._concepts) - self._capacity
        if overflow <= 0:
            return
        # sorted() is stable, so among equal activations the oldest goes first
        victims = sorted(self._concepts.values(), key=lambda c: c.activation)[:overflow]
        self._ordered = None
        for victim in victims:
            del self._concepts[victim.term]
            logger.debug(f"Evicted concept {victim.term} (activation {victim.activation:.3f})")
        assert len(self._concepts) <= self._capacity, "memory exceeded its capacity"
