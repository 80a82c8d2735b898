"""Unit tests for tasks, budgets, the id generator and the clock."""

import pytest

from narcore import (
    Budget,
    Clock,
    ETERNAL,
    Eternal,
    IdGenerator,
    Punctuation,
    Task,
    TaskBuilder,
    TaskConstructionError,
    Tense,
    Truth,
    atom,
    inh,
)
from narcore.task import in_time_range


ROBIN_BIRD = inh(atom("robin"), atom("bird"))


# ==============================================================================
# Budget Tests
# ==============================================================================


class TestBudget:
    """Test budget clamping and value."""

    def test_defaults(self):
        budget = Budget()
        assert (budget.priority, budget.durability, budget.quality) == (0.5, 0.5, 0.5)

    def test_clamped_on_construction(self):
        budget = Budget(1.7, -0.1, 0.3)
        assert budget.priority == 1.0
        assert budget.durability == 0.0
        assert budget.quality == 0.3

    def test_clamped_on_assignment(self):
        """Budgets are mutable in place but stay in range."""
        budget = Budget()
        budget.priority = 2.0
        assert budget.priority == 1.0
        budget.quality = -1.0
        assert budget.quality == 0.0

    def test_value(self):
        assert Budget(0.5, 0.4, 0.5).value == pytest.approx(0.1)


# ==============================================================================
# Task Tests
# ==============================================================================


class TestTask:
    """Test task construction and invariants."""

    def test_belief(self):
        task = Task(ROBIN_BIRD, Punctuation.BELIEF, id=1, truth=Truth(1.0, 0.9))
        assert task.is_belief()
        assert task.is_judgment()
        assert task.is_eternal()
        assert task.is_input()
        assert task.time == ETERNAL

    def test_question_rejects_truth(self):
        with pytest.raises(TaskConstructionError, match="Questions cannot have truth values"):
            Task(ROBIN_BIRD, Punctuation.QUESTION, id=1, truth=Truth())

    def test_quest_rejects_truth(self):
        with pytest.raises(TaskConstructionError, match="Quests cannot have truth values"):
            Task(ROBIN_BIRD, Punctuation.QUEST, id=1, truth=Truth())

    @pytest.mark.parametrize("punctuation", [Punctuation.BELIEF, Punctuation.GOAL, Punctuation.COMMAND])
    def test_judgments_require_truth(self, punctuation):
        with pytest.raises(TaskConstructionError, match="require a truth value"):
            Task(ROBIN_BIRD, punctuation, id=1)

    def test_construction_error_is_value_error(self):
        assert issubclass(TaskConstructionError, ValueError)

    def test_question_without_truth(self):
        task = Task(ROBIN_BIRD, Punctuation.QUESTION, id=3)
        assert task.truth is None
        assert task.is_question_like()

    def test_identity_by_id(self):
        a = Task(ROBIN_BIRD, Punctuation.BELIEF, id=7, truth=Truth())
        b = Task(inh(atom("x"), atom("y")), Punctuation.BELIEF, id=7, truth=Truth(0.0, 0.1))
        c = Task(ROBIN_BIRD, Punctuation.BELIEF, id=8, truth=Truth())
        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_fields_immutable_budget_mutable(self):
        task = Task(ROBIN_BIRD, Punctuation.BELIEF, id=1, truth=Truth())
        with pytest.raises(Exception):
            task.truth = Truth(0.0, 0.9)
        task.budget.priority = 0.9
        assert task.priority == 0.9

    def test_stamp_and_overlap(self):
        parent = Task(ROBIN_BIRD, Punctuation.BELIEF, id=1, truth=Truth())
        child = Task(ROBIN_BIRD, Punctuation.BELIEF, id=5, truth=Truth(), evidence={1, 2})
        stranger = Task(ROBIN_BIRD, Punctuation.BELIEF, id=9, truth=Truth(), evidence={3})
        assert child.evidence == frozenset({1, 2})
        assert child.stamp == frozenset({1, 2, 5})
        assert not child.is_input()
        assert child.overlaps(parent)
        assert not child.overlaps(stranger)

    def test_str(self):
        task = Task(inh(atom("robin"), atom("animal")), Punctuation.BELIEF, id=1, truth=Truth(1.0, 0.81))
        assert str(task) == "(robin --> animal). %1.00;0.81%"
        assert str(Task(ROBIN_BIRD, Punctuation.QUESTION, id=2)) == "(robin --> bird)?"


class TestTimeRange:
    """Test occurrence time filtering."""

    def test_eternal_always_in_range(self):
        assert in_time_range(ETERNAL, 5, 10)
        assert isinstance(ETERNAL, Eternal)

    def test_tense_bounds_inclusive(self):
        assert in_time_range(Tense(5), 5, 10)
        assert in_time_range(Tense(10), 5, 10)
        assert not in_time_range(Tense(11), 5, 10)
        assert not in_time_range(Tense(4), 5, 10)

    def test_open_bounds(self):
        assert in_time_range(Tense(-100), None, 0)
        assert in_time_range(Tense(100), 0, None)


# ==============================================================================
# Builder Tests
# ==============================================================================


class TestTaskBuilder:
    """Test fluent task construction."""

    def test_build_with_generator(self):
        ids = IdGenerator()
        task = (
            TaskBuilder(ids)
            .term(ROBIN_BIRD)
            .punctuation(Punctuation.BELIEF)
            .truth(Truth(1.0, 0.9))
            .build()
        )
        assert task.id == 1
        assert ids.peek() == 2
        assert task.budget == Budget()

    def test_explicit_id_and_fields(self):
        task = (
            TaskBuilder()
            .term(ROBIN_BIRD)
            .punctuation(Punctuation.GOAL)
            .truth(Truth(0.8, 0.7))
            .id(42)
            .time(Tense(3))
            .budget(Budget(0.9, 0.5, 0.5))
            .evidence([1, 2])
            .add_evidence(3)
            .creation_time(12)
            .build()
        )
        assert task.id == 42
        assert task.is_goal()
        assert task.time == Tense(3)
        assert task.priority == 0.9
        assert task.evidence == frozenset({1, 2, 3})
        assert task.creation_time == 12

    def test_missing_term(self):
        with pytest.raises(TaskConstructionError, match="Term is required"):
            TaskBuilder(IdGenerator()).punctuation(Punctuation.BELIEF).truth(Truth()).build()

    def test_missing_punctuation(self):
        with pytest.raises(TaskConstructionError, match="Punctuation is required"):
            TaskBuilder(IdGenerator()).term(ROBIN_BIRD).truth(Truth()).build()

    def test_missing_id_source(self):
        with pytest.raises(TaskConstructionError, match="id"):
            TaskBuilder().term(ROBIN_BIRD).punctuation(Punctuation.BELIEF).truth(Truth()).build()

    def test_question_with_truth(self):
        """Rejected builds do not consume an id."""
        ids = IdGenerator()
        builder = TaskBuilder(ids).term(ROBIN_BIRD).punctuation(Punctuation.QUESTION).truth(Truth())
        with pytest.raises(TaskConstructionError, match="Questions cannot have truth values"):
            builder.build()
        assert ids.peek() == 1


class TestIdGenerator:
    """Test the injected id source."""

    def test_monotonic(self):
        ids = IdGenerator()
        assert [ids.next() for _ in range(3)] == [1, 2, 3]

    def test_reset(self):
        ids = IdGenerator(start=10)
        ids.next()
        ids.reset()
        assert ids.next() == 10

    def test_independent_generators(self):
        a, b = IdGenerator(), IdGenerator()
        a.next()
        assert b.next() == 1


class TestClock:
    """Test logical time."""

    def test_next_and_reset(self):
        clock = Clock()
        assert clock.now == 0
        assert clock.next() == 1
        assert clock.next() == 2
        clock.reset()
        assert clock.now == 0

    def test_relative_occurrence(self):
        clock = Clock(start=5)
        assert clock.relative_occurrence(Tense(8)) == 3
        assert clock.relative_occurrence(Tense(2)) == -3
        assert clock.relative_occurrence(ETERNAL) is None

    def test_stamp(self):
        clock = Clock()
        clock.next()
        assert clock.stamp() == Tense(1)
