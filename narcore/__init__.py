"""narcore: a Non-Axiomatic Reasoning engine core.

The reasoner keeps a bounded memory of concepts, each holding uncertain,
evidence-weighted beliefs, goals and questions about one term. New beliefs
are derived by unifying rule patterns against the task in focus and the
beliefs held elsewhere; low-activation concepts are evicted to stay
within capacity.

Key components:
- Term / unify: symbolic expressions and structural pattern matching
- Truth / truth functions: NAL (frequency, confidence) calculus
- Task / Budget: sentences with attention budgets and evidence trails
- TaskTable / Concept / Memory: bounded knowledge storage
- Bag: bounded priority container for attention sampling
- Deriver / Rule: rule-driven inference
- NAR: the reasoning cycle and query surface

Example:
    from narcore import NAR, atom, inh

    nar = NAR()
    nar.input(nar.task(inh(atom("robin"), atom("bird"))))
    nar.input(nar.task(inh(atom("bird"), atom("animal"))))
    nar.run(1)
    print(nar.belief(inh(atom("robin"), atom("animal"))))  # %1.00;0.81%
"""

from .term import (
    Op,
    VarKind,
    Atom,
    Variable,
    Compound,
    Term,
    atom,
    var,
    pattern_var,
    compound,
    inh,
    sim,
    impl,
    equiv,
    conj,
    disj,
    neg,
    product,
    ext_set,
    int_set,
    term_key,
)
from .unification import Bindings, unify, match, substitute
from .truth import Truth
from .truth_functions import (
    negation,
    revision,
    deduction,
    induction,
    abduction,
    exemplification,
    comparison,
    analogy,
    conjunction,
    disjunction,
    revise_multiple,
    TRUTH_FUNCTIONS,
    get_truth_function,
    apply_truth_function,
)
from .task import (
    Punctuation,
    Eternal,
    ETERNAL,
    Tense,
    Budget,
    Task,
    TaskBuilder,
    TaskConstructionError,
    IdGenerator,
)
from .clock import Clock
from .table import TaskTable
from .concept import Concept, LinkingParams
from .bag import Bag
from .memory import Memory
from .rule import Rule, nal_rules
from .budget import BudgetPolicy, DefaultBudgetPolicy, get_budget_policy
from .deriver import Deriver, Premises
from .config import ReasonerConfig, load_config
from .engine import NAR, NARStats

__all__ = [
    # Terms
    "Op",
    "VarKind",
    "Atom",
    "Variable",
    "Compound",
    "Term",
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
    # Unification
    "Bindings",
    "unify",
    "match",
    "substitute",
    # Truth
    "Truth",
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
    # Tasks
    "Punctuation",
    "Eternal",
    "ETERNAL",
    "Tense",
    "Budget",
    "Task",
    "TaskBuilder",
    "TaskConstructionError",
    "IdGenerator",
    "Clock",
    # Storage
    "TaskTable",
    "Concept",
    "LinkingParams",
    "Bag",
    "Memory",
    # Inference
    "Rule",
    "nal_rules",
    "BudgetPolicy",
    "DefaultBudgetPolicy",
    "get_budget_policy",
    "Deriver",
    "Premises",
    # Reasoner
    "ReasonerConfig",
    "load_config",
    "NAR",
    "NARStats",
]
