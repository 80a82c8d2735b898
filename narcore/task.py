"""Tasks: sentences the reasoner holds, with their budgets.

A task pairs a term with a punctuation (what kind of sentence it is), a
truth value for judgments, an occurrence time, a mutable budget and an
evidence trail of ancestor task ids.

Punctuation:
- belief "."   - judgment about what is the case (has truth)
- goal "!"     - judgment about what should be the case (has truth)
- question "?" - asks for a belief (no truth)
- quest "@"    - asks for a goal (no truth)
- command ";"  - operation request (has truth)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Union

from pydantic import BaseModel, Field, field_validator

from .term import Term
from .truth import Truth

__all__ = [
    "Punctuation",
    "Eternal",
    "ETERNAL",
    "Tense",
    "Time",
    "in_time_range",
    "Budget",
    "Task",
    "TaskBuilder",
    "TaskConstructionError",
    "IdGenerator",
]


class TaskConstructionError(ValueError):
    """Raised when a task is built from missing or inconsistent fields."""


class Punctuation(str, Enum):
    """Sentence kinds, valued by their Narsese symbol."""

    BELIEF = "."
    GOAL = "!"
    QUESTION = "?"
    QUEST = "@"
    COMMAND = ";"

    @property
    def has_truth(self) -> bool:
        return self not in (Punctuation.QUESTION, Punctuation.QUEST)


@dataclass(frozen=True)
class Eternal:
    """Occurrence time of a sentence that holds regardless of time."""

    def __str__(self) -> str:
        return "eternal"


ETERNAL = Eternal()


@dataclass(frozen=True)
class Tense:
    """Occurrence at a logical time offset."""

    offset: int

    def __str__(self) -> str:
        return f":|{self.offset}|:"


Time = Union[Eternal, Tense]


def in_time_range(time: Time, start: int | None = None, end: int | None = None) -> bool:
    """Check an occurrence time against an inclusive range.

    Eternal times are always in range; a missing bound is open.
    """
    if isinstance(time, Eternal):
        return True
    if start is not None and time.offset < start:
        return False
    if end is not None and time.offset > end:
        return False
    return True


class Budget(BaseModel):
    """Attention budget of a task.

    All three components are clamped into [0, 1] on construction and on
    every assignment, so budgets can be adjusted in place.
    """

    model_config = {"validate_assignment": True}

    priority: float = Field(default=0.5, ge=0.0, le=1.0, description="Short-term importance")
    durability: float = Field(default=0.5, ge=0.0, le=1.0, description="Resistance to decay")
    quality: float = Field(default=0.5, ge=0.0, le=1.0, description="Long-term usefulness")

    def __init__(
        self,
        priority: float = 0.5,
        durability: float = 0.5,
        quality: float = 0.5,
        **data,
    ) -> None:
        super().__init__(priority=priority, durability=durability, quality=quality, **data)

    @field_validator("priority", "durability", "quality", mode="before")
    @classmethod
    def clamp(cls, v: float) -> float:
        v = float(v)
        if math.isnan(v):
            return 0.0
        return min(1.0, max(0.0, v))

    @property
    def value(self) -> float:
        """Overall worth: ``priority * durability * quality``."""
        return self.priority * self.durability * self.quality

    def __str__(self) -> str:
        return f"${self.priority:.2f};{self.durability:.2f};{self.quality:.2f}$"


@dataclass(frozen=True, eq=False)
class Task:
    """A sentence held by the reasoner.

    Term, punctuation, truth, time and evidence are fixed at construction;
    only the budget changes afterwards. Tasks are identified by id.

    Attributes:
        term: What the sentence is about
        punctuation: Sentence kind
        id: Unique task id
        truth: Truth value; None exactly for questions and quests
        time: Eternal or a tensed offset
        budget: Mutable attention budget
        evidence: Ids of the input tasks this one was derived from
        creation_time: Logical time the task was created
    """

    term: Term
    punctuation: Punctuation
    id: int
    truth: Truth | None = None
    time: Time = ETERNAL
    budget: Budget = field(default_factory=Budget)
    evidence: frozenset[int] = frozenset()
    creation_time: int = 0

    def __post_init__(self) -> None:
        if self.term is None:
            raise TaskConstructionError("Term is required")
        if self.punctuation is None:
            raise TaskConstructionError("Punctuation is required")
        if not isinstance(self.punctuation, Punctuation):
            object.__setattr__(self, "punctuation", Punctuation(self.punctuation))
        if self.punctuation is Punctuation.QUESTION and self.truth is not None:
            raise TaskConstructionError("Questions cannot have truth values")
        if self.punctuation is Punctuation.QUEST and self.truth is not None:
            raise TaskConstructionError("Quests cannot have truth values")
        if self.punctuation.has_truth and self.truth is None:
            raise TaskConstructionError(
                f"{self.punctuation.name.capitalize()} tasks require a truth value"
            )
        if not isinstance(self.evidence, frozenset):
            object.__setattr__(self, "evidence", frozenset(self.evidence))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        text = f"{self.term}{self.punctuation.value}"
        if isinstance(self.time, Tense):
            text += f" {self.time}"
        if self.truth is not None:
            text += f" {self.truth}"
        return text

    @property
    def priority(self) -> float:
        return self.budget.priority

    @property
    def stamp(self) -> frozenset[int]:
        """Full ancestry: the evidence trail plus this task's own id."""
        return self.evidence | {self.id}

    @property
    def complexity(self) -> int:
        return self.term.complexity

    def is_belief(self) -> bool:
        return self.punctuation is Punctuation.BELIEF

    def is_goal(self) -> bool:
        return self.punctuation is Punctuation.GOAL

    def is_question(self) -> bool:
        return self.punctuation is Punctuation.QUESTION

    def is_quest(self) -> bool:
        return self.punctuation is Punctuation.QUEST

    def is_command(self) -> bool:
        return self.punctuation is Punctuation.COMMAND

    def is_judgment(self) -> bool:
        return self.punctuation in (Punctuation.BELIEF, Punctuation.GOAL)

    def is_question_like(self) -> bool:
        return not self.punctuation.has_truth

    def is_eternal(self) -> bool:
        return isinstance(self.time, Eternal)

    def is_input(self) -> bool:
        """Input tasks have no ancestors."""
        return not self.evidence

    def overlaps(self, other: Task) -> bool:
        """Check whether two tasks share any ancestor (or are related)."""
        return not self.stamp.isdisjoint(other.stamp)


class IdGenerator:
    """Monotonic task id source.

    Owned by whoever drives the reasoner and injected where ids are minted,
    so tests can replay id sequences exactly.
    """

    def __init__(self, start: int = 1) -> None:
        self._start = start
        self._next = start

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        return self._next

    def reset(self) -> None:
        self._next = self._start


class TaskBuilder:
    """Fluent task construction.

    Example:
        task = (
            TaskBuilder(ids)
            .term(inh(atom("robin"), atom("bird")))
            .punctuation(Punctuation.BELIEF)
            .truth(Truth(1.0, 0.9))
            .build()
        )

    A builder with no explicit ``id()`` draws one from its IdGenerator.
    """

    def __init__(self, ids: IdGenerator | None = None) -> None:
        self._ids = ids
        self._term: Term | None = None
        self._punctuation: Punctuation | None = None
        self._truth: Truth | None = None
        self._time: Time = ETERNAL
        self._budget: Budget | None = None
        self._id: int | None = None
        self._evidence: set[int] = set()
        self._creation_time = 0

    def term(self, term: Term) -> TaskBuilder:
        self._term = term
        return self

    def punctuation(self, punctuation: Punctuation) -> TaskBuilder:
        self._punctuation = punctuation
        return self

    def truth(self, truth: Truth) -> TaskBuilder:
        self._truth = truth
        return self

    def time(self, time: Time) -> TaskBuilder:
        self._time = time
        return self

    def budget(self, budget: Budget) -> TaskBuilder:
        self._budget = budget
        return self

    def id(self, task_id: int) -> TaskBuilder:
        self._id = task_id
        return self

    def evidence(self, evidence: Iterable[int]) -> TaskBuilder:
        self._evidence = set(evidence)
        return self

    def add_evidence(self, task_id: int) -> TaskBuilder:
        self._evidence.add(task_id)
        return self

    def creation_time(self, time: int) -> TaskBuilder:
        self._creation_time = time
        return self

    def build(self) -> Task:
        """Validate the collected fields and create the task.

        Raises:
            TaskConstructionError: If term, punctuation or an id source is
                missing, or the truth value does not fit the punctuation
        """
        if self._term is None:
            raise TaskConstructionError("Term is required")
        if self._punctuation is None:
            raise TaskConstructionError("Punctuation is required")
        if self._id is None and self._ids is None:
            raise TaskConstructionError("Task id is required (set id() or pass an IdGenerator)")

        # Validate before drawing an id so rejected builds do not burn one
        punctuation = Punctuation(self._punctuation)
        if not punctuation.has_truth and self._truth is not None:
            kind = "Questions" if punctuation is Punctuation.QUESTION else "Quests"
            raise TaskConstructionError(f"{kind} cannot have truth values")

        task_id = self._id if self._id is not None else self._ids.next()
        return Task(
            term=self._term,
            punctuation=punctuation,
            id=task_id,
            truth=self._truth,
            time=self._time,
            budget=self._budget if self._budget is not None else Budget(),
            evidence=frozenset(self._evidence),
            creation_time=self._creation_time,
        )
