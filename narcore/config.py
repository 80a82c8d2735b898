"""Reasoner configuration.

All tunables of the reasoning cycle live in one pydantic model so they
can be validated once and loaded from JSON:

    config = load_config("reasoner.json")
    nar = NAR(config=config)

Unknown keys in a config file are rejected.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field

__all__ = ["ReasonerConfig", "load_config"]

logger = logging.getLogger(__name__)


class ReasonerConfig(BaseModel):
    """Tunables for memory, attention and derivation."""

    model_config = {"extra": "forbid"}

    # Memory
    memory_capacity: int = Field(default=10000, ge=1, description="Maximum number of concepts")
    table_capacity: int = Field(default=100, ge=1, description="Tasks per table in each concept")
    decay_rate: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Fraction of activation lost per cycle"
    )
    min_activation: float = Field(
        default=0.01, ge=0.0, le=1.0, description="Activation below which forget() drops a concept"
    )
    max_term_links: int = Field(default=10, ge=0, description="Term links kept per concept")
    max_task_links: int = Field(default=10, ge=0, description="Task links kept per concept")

    # Attention
    active_threshold: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Activation above which a concept counts as active"
    )
    working_set_size: int = Field(default=10, ge=1, description="Concepts processed per cycle")
    activation_gain: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Activation added per derived task"
    )
    random_visit_probability: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Chance per cycle of also visiting one uniformly random concept",
    )

    # Derivation
    max_candidates: int = Field(default=64, ge=1, description="Beliefs considered per focus")
    max_combinations: int = Field(
        default=256, ge=1, description="Complete premise matches kept per rule application"
    )
    cycle_time_budget: float | None = Field(
        default=None, gt=0.0, description="Wall-clock seconds allowed per cycle (None: unbounded)"
    )

    seed: int | None = Field(default=None, description="Seed for the random concept visit")


def load_config(path: str | Path) -> ReasonerConfig:
    """Load and validate a JSON config file.

    Args:
        path: Path to a JSON object with ReasonerConfig fields

    Returns:
        Validated config; missing fields take their defaults

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If a value is out of range or unknown
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    logger.debug(f"Loaded reasoner config from {path}")
    return ReasonerConfig.model_validate(data)
