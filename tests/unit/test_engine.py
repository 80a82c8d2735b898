"""Unit tests for the reasoner and its configuration.

Tests cover:
- Input and concept creation
- The reasoning cycle end to end
- Queries, stats and answer listeners
- Stop / reset
- Config validation and loading
"""

import json

import pytest
from pydantic import ValidationError

from narcore import (
    NAR,
    Budget,
    Punctuation,
    ReasonerConfig,
    Rule,
    Tense,
    Truth,
    atom,
    deduction,
    inh,
    load_config,
    pattern_var,
)


ROBIN_BIRD = inh(atom("robin"), atom("bird"))
BIRD_ANIMAL = inh(atom("bird"), atom("animal"))
ROBIN_ANIMAL = inh(atom("robin"), atom("animal"))


# ==============================================================================
# Input Tests
# ==============================================================================


class TestInput:
    """Test task admission through the NAR."""

    def test_input_creates_concept(self):
        nar = NAR()
        assert nar.input(nar.task(ROBIN_BIRD)) is True
        concept = nar.concept(ROBIN_BIRD)
        assert concept is not None
        assert len(concept.beliefs) == 1
        # Default budget priority 0.5 times input activation 1.0
        assert concept.activation == pytest.approx(0.5)

    def test_task_helper_defaults(self):
        nar = NAR()
        belief = nar.task(ROBIN_BIRD)
        goal = nar.task(ROBIN_BIRD, Punctuation.GOAL)
        question = nar.task(ROBIN_BIRD, Punctuation.QUESTION)
        assert belief.truth == Truth(1.0, 0.9)
        assert goal.truth == Truth(1.0, 0.9)
        assert question.truth is None
        assert [belief.id, goal.id, question.id] == [1, 2, 3]

    def test_reinput_merges_into_same_concept(self):
        """Identical sentences share one concept and go through table admission."""
        nar = NAR()
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(ROBIN_BIRD))
        assert nar.stats().concept_count == 1
        assert len(nar.concept(ROBIN_BIRD).beliefs) == 2

    def test_reinput_into_full_table(self):
        nar = NAR(ReasonerConfig(table_capacity=1))
        nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.5, 0.5, 0.5)))
        assert nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.5, 0.5, 0.5))) is False
        assert nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.8, 0.5, 0.5))) is True
        assert nar.stats().concept_count == 1
        assert len(nar.concept(ROBIN_BIRD).beliefs) == 1

    def test_conceptualize(self):
        nar = NAR()
        concept = nar.conceptualize(atom("cat"))
        assert concept.activation == 0.0
        assert nar.stats().concept_count == 1


# ==============================================================================
# Cycle Tests
# ==============================================================================


class TestCycle:
    """Test the reasoning cycle."""

    def test_deduction_end_to_end(self):
        """bird --> animal and robin --> bird yield robin --> animal at (1.0, 0.81)."""
        nar = NAR(ReasonerConfig(random_visit_probability=0.0))
        nar.input(nar.task(BIRD_ANIMAL))
        nar.input(nar.task(ROBIN_BIRD))
        nar.run(3)

        expected = deduction(Truth(1.0, 0.9), Truth(1.0, 0.9))
        assert expected == Truth(1.0, 0.81)
        assert nar.belief(ROBIN_ANIMAL) == expected

        answer = nar.answer(ROBIN_ANIMAL, Punctuation.BELIEF)
        assert answer is not None
        assert answer.evidence == frozenset({1, 2})

    def test_single_cycle_derives(self):
        nar = NAR(ReasonerConfig(random_visit_probability=0.0))
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(BIRD_ANIMAL))
        stored = nar.cycle()
        assert stored >= 1
        assert nar.belief(ROBIN_ANIMAL) == Truth(1.0, 0.81)
        assert nar.time == 1

    def test_equivalent_derivations_not_duplicated(self):
        """Both deduction orders reach robin --> animal from the same evidence once."""
        nar = NAR(ReasonerConfig(random_visit_probability=0.0))
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(BIRD_ANIMAL))
        nar.run(5)
        assert len(nar.concept(ROBIN_ANIMAL).beliefs) == 1

    def test_decay_applied(self):
        nar = NAR(ReasonerConfig(decay_rate=0.5, random_visit_probability=0.0))
        nar.input(nar.task(atom("cat")))
        nar.cycle()
        assert nar.concept(atom("cat")).activation == pytest.approx(0.25)

    def test_derived_concept_gains_activation(self):
        nar = NAR(ReasonerConfig(activation_gain=0.3, random_visit_probability=0.0))
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(BIRD_ANIMAL))
        nar.cycle()
        assert nar.concept(ROBIN_ANIMAL).activation == pytest.approx(0.3)

    def test_working_set_limits_visits(self):
        """Only the most active concepts are processed."""
        rule = Rule("converse", (inh(pattern_var("S"), pattern_var("P")),), inh(pattern_var("P"), pattern_var("S")), "negation")
        config = ReasonerConfig(working_set_size=1, random_visit_probability=0.0)
        nar = NAR(config, rules=[rule])
        nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.9, 0.5, 0.5)))
        nar.input(nar.task(BIRD_ANIMAL, budget=Budget(0.2, 0.5, 0.5)))
        nar.cycle()
        assert nar.concept(inh(atom("bird"), atom("robin"))) is not None
        assert nar.concept(inh(atom("animal"), atom("bird"))) is None

    def test_random_visit(self, monkeypatch):
        """A random visit processes a concept the working set left out."""
        rule = Rule("converse", (inh(pattern_var("S"), pattern_var("P")),), inh(pattern_var("P"), pattern_var("S")), "negation")
        config = ReasonerConfig(working_set_size=1, random_visit_probability=1.0, seed=1)
        nar = NAR(config, rules=[rule])
        nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.9, 0.5, 0.5)))
        nar.input(nar.task(BIRD_ANIMAL, budget=Budget(0.2, 0.5, 0.5)))
        monkeypatch.setattr(nar._random, "choice", lambda terms: BIRD_ANIMAL)
        nar.cycle()
        assert nar.concept(inh(atom("bird"), atom("robin"))) is not None
        assert nar.concept(inh(atom("animal"), atom("bird"))) is not None

    def test_seeded_runs_are_reproducible(self):
        def run_once():
            nar = NAR(ReasonerConfig(random_visit_probability=0.5, seed=3))
            for name in "abcd":
                nar.input(nar.task(inh(atom(name), atom("b" if name != "b" else "c"))))
            nar.run(5)
            return [str(c.term) for c in nar.memory.concepts()], nar.stats()

        assert run_once() == run_once()

    def test_memory_capacity_respected(self):
        nar = NAR(ReasonerConfig(memory_capacity=3, random_visit_probability=0.0))
        for name in "abcdef":
            nar.input(nar.task(inh(atom(name), atom("thing"))))
        nar.run(3)
        assert nar.stats().concept_count <= 3

    def test_cycle_time_budget(self):
        """An exhausted budget skips derivation without failing the cycle."""
        nar = NAR(ReasonerConfig(cycle_time_budget=1e-9, random_visit_probability=0.0))
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(BIRD_ANIMAL))
        assert nar.cycle() == 0
        assert nar.time == 1
        assert nar.deriver.derivation_count == 0

    def test_empty_memory_cycle(self):
        nar = NAR(ReasonerConfig(random_visit_probability=1.0))
        assert nar.cycle() == 0


# ==============================================================================
# Query Tests
# ==============================================================================


class TestQueries:
    """Test belief/goal/answer queries, stats and listeners."""

    def test_belief_and_goal(self):
        nar = NAR()
        nar.input(nar.task(ROBIN_BIRD, truth=Truth(0.8, 0.7)))
        nar.input(nar.task(ROBIN_BIRD, Punctuation.GOAL, truth=Truth(0.6, 0.5)))
        assert nar.belief(ROBIN_BIRD) == Truth(0.8, 0.7)
        assert nar.goal(ROBIN_BIRD) == Truth(0.6, 0.5)
        assert nar.belief(BIRD_ANIMAL) is None
        assert nar.goal(BIRD_ANIMAL) is None

    def test_time_range(self):
        nar = NAR()
        nar.input(nar.task(ROBIN_BIRD, truth=Truth(0.1, 0.9), time=Tense(50), budget=Budget(0.9, 0.5, 0.5)))
        nar.input(nar.task(ROBIN_BIRD, truth=Truth(0.9, 0.9), time=Tense(5), budget=Budget(0.4, 0.5, 0.5)))
        assert nar.belief(ROBIN_BIRD) == Truth(0.1, 0.9)
        assert nar.belief(ROBIN_BIRD, 0, 10) == Truth(0.9, 0.9)
        assert nar.belief(ROBIN_BIRD, 100, 200) is None

    def test_answer(self):
        nar = NAR()
        question = nar.task(ROBIN_BIRD, Punctuation.QUESTION)
        nar.input(question)
        assert nar.answer(ROBIN_BIRD, Punctuation.QUESTION) == question
        assert nar.answer(ROBIN_BIRD, Punctuation.BELIEF) is None
        assert nar.answer(ROBIN_BIRD, Punctuation.COMMAND) is None
        assert nar.answer(BIRD_ANIMAL, Punctuation.QUESTION) is None

    def test_stats(self):
        nar = NAR(ReasonerConfig(active_threshold=0.3))
        nar.input(nar.task(ROBIN_BIRD, budget=Budget(0.9, 0.5, 0.5)))
        nar.input(nar.task(BIRD_ANIMAL, budget=Budget(0.1, 0.5, 0.5)))
        stats = nar.stats()
        assert stats.time == 0
        assert stats.concept_count == 2
        assert stats.active_concept_count == 1

    def test_answer_listener(self):
        nar = NAR(ReasonerConfig(random_visit_probability=0.0))
        answers = []
        nar.on_answer(lambda q, a: answers.append((q, a)))

        question = nar.task(ROBIN_ANIMAL, Punctuation.QUESTION, budget=Budget(0.9, 0.5, 0.5))
        nar.input(question)
        nar.input(nar.task(ROBIN_BIRD))
        nar.input(nar.task(BIRD_ANIMAL))
        nar.run(3)

        assert len(answers) == 1
        asked, answer = answers[0]
        assert asked == question
        assert answer.term == ROBIN_ANIMAL
        assert answer.truth == Truth(1.0, 0.81)


# ==============================================================================
# Control Tests
# ==============================================================================


class TestControl:
    """Test run, stop and reset."""

    def test_run_counts_cycles(self):
        nar = NAR()
        assert nar.run(4) == 4
        assert nar.time == 4
        assert nar.running is False

    def test_stop_from_listener(self):
        nar = NAR(ReasonerConfig(random_visit_probability=0.0))
        nar.on_answer(lambda q, a: nar.stop())
        nar.input(nar.task(ROBIN_BIRD, Punctuation.QUESTION))
        nar.input(nar.task(ROBIN_BIRD))
        assert nar.run(10) == 1

    def test_reset_clears_memory_and_clock(self):
        nar = NAR()
        nar.input(nar.task(ROBIN_BIRD))
        nar.run(2)
        nar.reset()
        assert nar.time == 0
        assert nar.stats().concept_count == 0
        assert nar.task(ROBIN_BIRD).id == 1

    def test_reset_keeping_memory(self):
        nar = NAR()
        nar.input(nar.task(ROBIN_BIRD))
        nar.run(2)
        nar.reset(clear_memory=False)
        assert nar.time == 0
        assert nar.stats().concept_count == 1
        assert nar.task(ROBIN_BIRD).id == 2

    def test_forget(self):
        nar = NAR(ReasonerConfig(min_activation=0.2))
        nar.conceptualize(atom("cold"))
        nar.input(nar.task(ROBIN_BIRD))
        assert nar.forget() == 1
        assert nar.concept(atom("cold")) is None


# ==============================================================================
# Config Tests
# ==============================================================================


class TestConfig:
    """Test configuration validation and loading."""

    def test_defaults(self):
        config = ReasonerConfig()
        assert config.memory_capacity == 10000
        assert config.decay_rate == 0.1
        assert config.min_activation == 0.01
        assert config.max_term_links == 10
        assert config.cycle_time_budget is None

    def test_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            ReasonerConfig(decay_rate=1.5)
        with pytest.raises(ValidationError):
            ReasonerConfig(memory_capacity=0)

    def test_rejects_unknown_keys(self):
        with pytest.raises(ValidationError):
            ReasonerConfig(memory_size=5)

    def test_load_config(self, tmp_path):
        path = tmp_path / "reasoner.json"
        path.write_text(json.dumps({"memory_capacity": 50, "seed": 7}))
        config = load_config(path)
        assert config.memory_capacity == 50
        assert config.seed == 7
        assert config.table_capacity == 100

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_config_wires_components(self):
        nar = NAR(ReasonerConfig(memory_capacity=5, max_candidates=3, max_combinations=4))
        assert nar.memory.capacity == 5
        assert nar.deriver.max_candidates == 3
        assert nar.deriver.max_combinations == 4
