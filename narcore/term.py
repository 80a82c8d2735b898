"""Terms: the symbolic expressions concepts are named by.

A term is one of three immutable value types:

- Atom: a named, integer or boolean constant
- Variable: a typed placeholder (dependent, independent, query, pattern)
- Compound: an operator applied to an ordered tuple of subterms, with an
  optional temporal offset

Terms compare and hash structurally, so two independently built
``(cat --> animal)`` values are interchangeable as dict keys.

Example:
    >>> t = inh(atom("cat"), atom("animal"))
    >>> str(t)
    '(cat --> animal)'
    >>> t.complexity
    3
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterator, Union

__all__ = [
    "Op",
    "VarKind",
    "Atom",
    "Variable",
    "Compound",
    "Term",
    "STATEMENT_OPS",
    "atom",
    "var",
    "pattern_var",
    "compound",
    "inh",
    "sim",
    "impl",
    "equiv",
    "conj",
    "disj",
    "neg",
    "product",
    "ext_set",
    "int_set",
    "term_key",
]


class Op(str, Enum):
    """Compound term operators, valued by their Narsese symbol."""

    INHERITANCE = "-->"
    SIMILARITY = "<->"
    IMPLICATION = "==>"
    EQUIVALENCE = "<=>"
    CONJUNCTION = "&&"
    DISJUNCTION = "||"
    EXT_INTERSECTION = "&"
    INT_INTERSECTION = "|"
    EXT_DIFFERENCE = "-"
    INT_DIFFERENCE = "~"
    NEGATION = "--"
    PRODUCT = "*"
    EXT_IMAGE = "/"
    INT_IMAGE = "\\"
    EXT_SET = "{}"
    INT_SET = "[]"


class VarKind(str, Enum):
    """Variable kinds, valued by their Narsese prefix."""

    DEPENDENT = "#"
    INDEPENDENT = "$"
    QUERY = "?"
    PATTERN = "%"


# Copulas: binary operators that make a compound a statement
STATEMENT_OPS = frozenset(
    {Op.INHERITANCE, Op.SIMILARITY, Op.IMPLICATION, Op.EQUIVALENCE}
)

_VAR_PREFIXES = {kind.value: kind for kind in VarKind}


class _TermMixin:
    """Queries shared by all three term kinds."""

    # Plain attribute, not a property: Compound stores its own as a field
    subterms = ()

    @property
    def complexity(self) -> int:
        return 1

    @property
    def is_atomic(self) -> bool:
        return False

    @property
    def is_variable(self) -> bool:
        return False

    @property
    def is_compound(self) -> bool:
        return False

    @property
    def is_statement(self) -> bool:
        return False

    @property
    def is_reflexive(self) -> bool:
        """True for statements whose subject equals their predicate."""
        return False

    def walk(self) -> Iterator[Term]:
        """Yield this term and every nested subterm, depth first."""
        stack: list = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.subterms))

    def variables(self) -> set[Variable]:
        return {t for t in self.walk() if isinstance(t, Variable)}

    def has_variables(self, kind: VarKind | None = None) -> bool:
        """Check whether any variable (optionally of one kind) occurs."""
        return any(
            isinstance(t, Variable) and (kind is None or t.kind is kind)
            for t in self.walk()
        )


@dataclass(frozen=True, eq=False)
class Atom(_TermMixin):
    """Atomic constant term.

    Equality distinguishes the value's type, so ``Atom(1)``, ``Atom(True)``
    and ``Atom("1")`` are three different terms.
    """

    value: str | int | bool

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Atom):
            return NotImplemented
        return type(self.value) is type(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self.value).__name__, self.value))

    @property
    def is_atomic(self) -> bool:
        return True

    def __str__(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class Variable(_TermMixin):
    """Typed variable term, rendered as prefix + name (``%S``, ``$x``)."""

    kind: VarKind
    name: str

    @property
    def is_variable(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"{self.kind.value}{self.name}"


@dataclass(frozen=True)
class Compound(_TermMixin):
    """Operator applied to ordered subterms.

    Attributes:
        op: The compound operator
        subterms: Ordered component terms
        dt: Optional temporal offset between components
    """

    op: Op
    subterms: tuple[Term, ...]
    dt: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.subterms, tuple):
            object.__setattr__(self, "subterms", tuple(self.subterms))

    @cached_property
    def complexity(self) -> int:  # type: ignore[override]
        return 1 + sum(sub.complexity for sub in self.subterms)

    @property
    def is_compound(self) -> bool:
        return True

    @property
    def is_statement(self) -> bool:
        return self.op in STATEMENT_OPS and len(self.subterms) == 2

    @property
    def is_reflexive(self) -> bool:
        return self.is_statement and self.subterms[0] == self.subterms[1]

    @property
    def subject(self) -> Term:
        return self.subterms[0]

    @property
    def predicate(self) -> Term:
        return self.subterms[-1]

    def __str__(self) -> str:
        return self.text

    @cached_property
    def text(self) -> str:
        """Canonical Narsese rendering, computed once per term."""
        parts = [str(sub) for sub in self.subterms]
        if self.is_statement:
            text = f"({parts[0]} {self.op.value} {parts[1]})"
        elif self.op is Op.EXT_SET:
            text = "{" + ", ".join(parts) + "}"
        elif self.op is Op.INT_SET:
            text = "[" + ", ".join(parts) + "]"
        elif self.op is Op.PRODUCT:
            text = "(" + ", ".join(parts) + ")"
        else:
            text = f"({self.op.value}, " + ", ".join(parts) + ")"
        if self.dt is not None:
            text = f"{text}_{self.dt}"
        return text


Term = Union[Atom, Variable, Compound]


# ==============================================================================
# Constructors
# ==============================================================================


def atom(value: str | int | bool) -> Atom:
    return Atom(value)


def var(name: str, kind: VarKind | None = None) -> Variable:
    """Build a variable, reading its kind from a Narsese prefix if not given.

    Args:
        name: Variable name, e.g. ``"x"`` or ``"$x"``
        kind: Variable kind; when omitted, ``name`` must start with one of
            ``# $ ? %``

    Returns:
        The variable term

    Raises:
        ValueError: If no kind is given and the name carries no prefix
    """
    if kind is None:
        if not name or name[0] not in _VAR_PREFIXES:
            raise ValueError(f"Variable '{name}' has no kind prefix (one of # $ ? %)")
        return Variable(_VAR_PREFIXES[name[0]], name[1:])
    return Variable(kind, name)


def pattern_var(name: str) -> Variable:
    """Build a rule pattern variable (``%name``)."""
    return Variable(VarKind.PATTERN, name)


def compound(op: Op, *subterms: Term, dt: int | None = None) -> Compound:
    return Compound(op, tuple(subterms), dt)


def inh(subject: Term, predicate: Term) -> Compound:
    """Inheritance statement ``(subject --> predicate)``."""
    return Compound(Op.INHERITANCE, (subject, predicate))


def sim(subject: Term, predicate: Term) -> Compound:
    """Similarity statement ``(subject <-> predicate)``."""
    return Compound(Op.SIMILARITY, (subject, predicate))


def impl(antecedent: Term, consequent: Term, dt: int | None = None) -> Compound:
    return Compound(Op.IMPLICATION, (antecedent, consequent), dt)


def equiv(left: Term, right: Term, dt: int | None = None) -> Compound:
    return Compound(Op.EQUIVALENCE, (left, right), dt)


def conj(*terms: Term, dt: int | None = None) -> Compound:
    return Compound(Op.CONJUNCTION, tuple(terms), dt)


def disj(*terms: Term) -> Compound:
    return Compound(Op.DISJUNCTION, tuple(terms))


def neg(term: Term) -> Compound:
    return Compound(Op.NEGATION, (term,))


def product(*terms: Term) -> Compound:
    return Compound(Op.PRODUCT, tuple(terms))


def ext_set(*terms: Term) -> Compound:
    return Compound(Op.EXT_SET, tuple(terms))


def int_set(*terms: Term) -> Compound:
    return Compound(Op.INT_SET, tuple(terms))


def term_key(term: Term) -> bytes:
    """Deterministic byte key ordering terms by complexity, then text.

    The first two bytes are the big-endian complexity (saturating at
    0xFFFF), followed by the UTF-8 canonical string, so terms sharing
    structure sort next to each other.
    """
    complexity = min(term.complexity, 0xFFFF)
    return complexity.to_bytes(2, "big") + str(term).encode("utf-8")
