"""Structural unification of rule patterns against concrete terms.

Only pattern variables (``%S``) bind. Every other term in a pattern,
including variables of the other kinds, has to match the target exactly.

Bindings accumulate across calls, so a premise list is matched by
threading the same bindings through successive ``unify`` calls: a
variable bound by the first premise must be matched by the same term in
later premises.

Example:
    Pattern: (%S --> %M)
    Term:    (robin --> bird)
    Result:  {%S: robin, %M: bird}
"""

from __future__ import annotations

from .term import Compound, Term, Variable, VarKind

__all__ = [
    "Bindings",
    "unify",
    "match",
    "substitute",
]

# Maps pattern variables to the terms they are bound to
Bindings = dict[Variable, Term]


def _unify_into(pattern: Term, term: Term, bindings: Bindings) -> bool:
    if isinstance(pattern, Variable) and pattern.kind is VarKind.PATTERN:
        bound = bindings.get(pattern)
        if bound is None:
            bindings[pattern] = term
            return True
        return bound == term

    if isinstance(pattern, Compound):
        if not isinstance(term, Compound):
            return False
        if pattern.op is not term.op or len(pattern.subterms) != len(term.subterms):
            return False
        # An unspecified offset in the pattern matches any offset
        if pattern.dt is not None and pattern.dt != term.dt:
            return False
        return all(
            _unify_into(p, t, bindings)
            for p, t in zip(pattern.subterms, term.subterms)
        )

    return pattern == term


def unify(pattern: Term, term: Term, bindings: Bindings) -> bool:
    """Unify a pattern with a term, extending ``bindings`` on success.

    Args:
        pattern: Pattern term, possibly containing pattern variables
        term: Concrete term to match
        bindings: Accumulated bindings; updated in place only if the
            whole match succeeds

    Returns:
        True if the pattern matches the term under the bindings
    """
    trial = dict(bindings)
    if not _unify_into(pattern, term, trial):
        return False
    bindings.update(trial)
    return True


def match(pattern: Term, term: Term, bindings: Bindings | None = None) -> Bindings | None:
    """Non-mutating form of ``unify``.

    Returns:
        A new bindings dict extending ``bindings``, or None if no match
    """
    result = dict(bindings) if bindings else {}
    if _unify_into(pattern, term, result):
        return result
    return None


def substitute(term: Term, bindings: Bindings) -> Term:
    """Replace bound variables in a term with their bindings.

    Unbound variables are left in place.
    """
    if isinstance(term, Variable):
        return bindings.get(term, term)
    if isinstance(term, Compound):
        subterms = tuple(substitute(sub, bindings) for sub in term.subterms)
        if subterms == term.subterms:
            return term
        return Compound(term.op, subterms, term.dt)
    return term
