"""Inference rules and the default NAL rule set.

A rule is a list of premise patterns, a conclusion pattern and the name
of the truth function that computes the conclusion's truth. Patterns use
pattern variables (``%S``, ``%M``, ``%P``) that bind during unification.

The first premise is matched against the task in focus; the remaining
premises are matched against beliefs found elsewhere in memory.

Example:
    Rule "deduction":
        premises:   (%M --> %P), (%S --> %M)
        conclusion: (%S --> %P)
"""

from __future__ import annotations

from dataclasses import dataclass

from .task import Punctuation
from .term import Term, impl, inh, pattern_var, sim
from .truth_functions import TruthFunction, get_truth_function

__all__ = ["Rule", "nal_rules"]


@dataclass
class Rule:
    """An inference rule.

    Attributes:
        name: Rule identifier for logging
        premises: Ordered premise patterns; the first matches the focus
        conclusion: Conclusion pattern
        truth_function: Registered truth function name
        punctuation: Punctuation of derived tasks
    """

    name: str
    premises: tuple[Term, ...]
    conclusion: Term
    truth_function: str
    punctuation: Punctuation = Punctuation.BELIEF

    def __post_init__(self) -> None:
        if not isinstance(self.premises, tuple):
            self.premises = tuple(self.premises)
        if not self.premises:
            raise ValueError(f"Rule '{self.name}' needs at least one premise")
        # Fail at construction on unknown names
        get_truth_function(self.truth_function)

    @property
    def function(self) -> TruthFunction:
        return get_truth_function(self.truth_function)

    def __str__(self) -> str:
        premises = ", ".join(str(p) for p in self.premises)
        return f"{self.name}: {premises} |- {self.conclusion} [{self.truth_function}]"


def nal_rules() -> list[Rule]:
    """Default first-order syllogisms plus conditional deduction.

    Each two-premise syllogism is listed in both premise orders with the
    matching truth function, so a rule fires whichever premise is in focus.
    """
    s, m, p = pattern_var("S"), pattern_var("M"), pattern_var("P")
    a, b = pattern_var("A"), pattern_var("B")
    return [
        Rule("deduction", (inh(m, p), inh(s, m)), inh(s, p), "deduction"),
        Rule("deduction", (inh(s, m), inh(m, p)), inh(s, p), "deduction"),
        Rule("abduction", (inh(p, m), inh(s, m)), inh(s, p), "abduction"),
        Rule("induction", (inh(m, p), inh(m, s)), inh(s, p), "induction"),
        Rule("exemplification", (inh(p, m), inh(m, s)), inh(s, p), "exemplification"),
        Rule("comparison", (inh(m, p), inh(m, s)), sim(s, p), "comparison"),
        Rule("analogy", (inh(m, p), sim(s, m)), inh(s, p), "analogy"),
        Rule("conditional_deduction", (impl(a, b), a), b, "deduction"),
        Rule("conditional_deduction", (a, impl(a, b)), b, "deduction"),
    ]
