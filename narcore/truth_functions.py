"""NAL truth functions.

Each function maps premise truth values to the truth of a conclusion.
They are pure, never raise on boundary values (0 or 1), and rely on
``Truth`` construction to clamp results into range.

The syllogistic functions are order sensitive: ``a`` is the first
premise as declared by the rule, ``b`` the second.

Key functions:
- revision: Pool two independent bodies of evidence about one statement
- deduction, induction, abduction, exemplification: first-order syllogisms
- comparison, analogy: similarity-based inference
- conjunction, disjunction, negation: compound truth

Usage:
    from narcore.truth_functions import get_truth_function

    fn = get_truth_function("deduction")
    derived = apply_truth_function(fn, [focus.truth, belief.truth])
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

from .truth import Truth

__all__ = [
    "TruthFunction",
    "negation",
    "revision",
    "deduction",
    "induction",
    "abduction",
    "exemplification",
    "comparison",
    "analogy",
    "conjunction",
    "disjunction",
    "revise_multiple",
    "TRUTH_FUNCTIONS",
    "get_truth_function",
    "apply_truth_function",
]

TruthFunction = Callable[..., Truth]


def negation(a: Truth) -> Truth:
    """Invert frequency, keep confidence: ``(1 - f, c)``."""
    return Truth(1.0 - a.frequency, a.confidence)


def revision(a: Truth, b: Truth) -> Truth:
    """Combine two independent truth values for the same statement.

    Formula:
        w1 = c1 / (1 - c1), w2 = c2 / (1 - c2)
        f = (w1 * f1 + w2 * f2) / (w1 + w2)
        c = (w1 + w2) / (w1 + w2 + 1)

    Args:
        a: First truth value
        b: Second truth value

    Returns:
        Revised truth value, more confident than either input
    """
    w1, w2 = a.evidence(), b.evidence()

    if math.isinf(w1) or math.isinf(w2):
        # Certainty cannot be outweighed; two certainties are averaged
        if math.isinf(w1) and math.isinf(w2):
            return Truth((a.frequency + b.frequency) / 2.0, 1.0)
        return a if math.isinf(w1) else b

    total = w1 + w2
    if total <= 0.0:
        return Truth((a.frequency + b.frequency) / 2.0, 0.0)

    f = (w1 * a.frequency + w2 * b.frequency) / total
    return Truth.from_evidence(f, total)


def deduction(a: Truth, b: Truth) -> Truth:
    """NAL deduction: {M --> P, S --> M} |- S --> P.

    Formula:
        f = f1 * f2
        c = f1 * f2 * c1 * c2
    """
    f = a.frequency * b.frequency
    return Truth(f, f * a.confidence * b.confidence)


def induction(a: Truth, b: Truth) -> Truth:
    """NAL induction: {M --> P, M --> S} |- S --> P.

    Formula:
        f = f1 * f2
        c = c1 * c2 * f / (f1 * f2 + 1)
    """
    f = a.frequency * b.frequency
    c = a.confidence * b.confidence * f / (a.frequency * b.frequency + 1.0)
    return Truth(f, c)


def abduction(a: Truth, b: Truth) -> Truth:
    """NAL abduction: {P --> M, S --> M} |- S --> P.

    Formula:
        f = f1 * f2
        c = c1 * c2 * f / (f2 * f2 + 1)
    """
    f = a.frequency * b.frequency
    c = a.confidence * b.confidence * f / (b.frequency * b.frequency + 1.0)
    return Truth(f, c)


def exemplification(a: Truth, b: Truth) -> Truth:
    """NAL exemplification: {P --> M, M --> S} |- S --> P.

    Formula:
        f = 1 - f1 * f2
        c = c1 * c2 * f / (f1 * f2 + 1)
    """
    product = a.frequency * b.frequency
    f = 1.0 - product
    return Truth(f, a.confidence * b.confidence * f / (product + 1.0))


def comparison(a: Truth, b: Truth) -> Truth:
    """NAL comparison: {M --> P, M --> S} |- S <-> P.

    Formula:
        f = f1 * f2 / (f1 * f2 + (1 - f1) * (1 - f2))
        c = c1 * c2 * f

    Frequency is 0 when the denominator vanishes.
    """
    both = a.frequency * b.frequency
    neither = (1.0 - a.frequency) * (1.0 - b.frequency)
    denominator = both + neither
    f = both / denominator if denominator > 0.0 else 0.0
    return Truth(f, a.confidence * b.confidence * f)


def analogy(a: Truth, b: Truth) -> Truth:
    """NAL analogy: {M --> P, S <-> M} |- S --> P.

    Formula:
        f = f1 * f2
        c = c1 * c2 * f
    """
    f = a.frequency * b.frequency
    return Truth(f, a.confidence * b.confidence * f)


def conjunction(a: Truth, b: Truth) -> Truth:
    """Extensional intersection: ``(f1 * f2, c1 * c2)``."""
    return Truth(a.frequency * b.frequency, a.confidence * b.confidence)


def disjunction(a: Truth, b: Truth) -> Truth:
    """Extensional union: ``(f1 + f2 - f1 * f2, c1 * c2)``."""
    f = a.frequency + b.frequency - a.frequency * b.frequency
    return Truth(f, a.confidence * b.confidence)


def revise_multiple(truths: Sequence[Truth]) -> Truth:
    """Revise a list of truth values left to right.

    Returns:
        The pooled truth value, or total uncertainty for an empty list
    """
    if not truths:
        return Truth.uncertainty()
    result = truths[0]
    for tv in truths[1:]:
        result = revision(result, tv)
    return result


TRUTH_FUNCTIONS: dict[str, TruthFunction] = {
    "negation": negation,
    "revision": revision,
    "deduction": deduction,
    "induction": induction,
    "abduction": abduction,
    "exemplification": exemplification,
    "comparison": comparison,
    "analogy": analogy,
    "conjunction": conjunction,
    "disjunction": disjunction,
}

_UNARY = {negation}


def get_truth_function(name: str) -> TruthFunction:
    """Get truth function by name.

    Args:
        name: Registered function name, e.g. "deduction"

    Returns:
        The truth function

    Raises:
        KeyError: If the name is unknown
    """
    if name not in TRUTH_FUNCTIONS:
        raise KeyError(
            f"Unknown truth function: {name}. Valid: {list(TRUTH_FUNCTIONS.keys())}"
        )
    return TRUTH_FUNCTIONS[name]


def apply_truth_function(function: TruthFunction | str, truths: Sequence[Truth]) -> Truth:
    """Apply a truth function to an ordered list of premise truths.

    Unary functions see only the first truth. Binary functions fold left
    across the list, so three premises compute ``fn(fn(t1, t2), t3)``; a
    single truth passes through unchanged.

    Args:
        function: Truth function or its registered name
        truths: Premise truths, focus first, then matched premises in order

    Returns:
        The derived truth value

    Raises:
        ValueError: If no truths are given
    """
    if isinstance(function, str):
        function = get_truth_function(function)
    if not truths:
        raise ValueError("Truth functions need at least one premise truth")
    if function in _UNARY:
        return function(truths[0])
    result = truths[0]
    for tv in truths[1:]:
        result = function(result, tv)
    return result
