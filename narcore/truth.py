"""Truth values: NAL's (frequency, confidence) pair.

- frequency (f): [0.0, 1.0] - proportion of positive evidence
- confidence (c): [0.0, 1.0] - strength of that evidence

Out-of-range inputs are clamped rather than rejected, so every truth
function can return raw arithmetic and rely on construction to keep the
result in range.

The dual "amount of evidence" view maps confidence to a weight
``w = c / (1 - c)`` and back with ``c = w / (w + 1)``.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_validator

__all__ = ["Truth", "TRUTH_EPSILON"]

# Tolerance for truth value equality
TRUTH_EPSILON = 1e-4


class Truth(BaseModel):
    """NAL truth value.

    Example:
        - Truth(1.0, 0.9) means "true, with the confidence of one observation"
        - Truth(0.5, 0.0) means "no evidence either way"
    """

    model_config = {"frozen": True}

    frequency: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Proportion of positive evidence [0.0, 1.0]",
    )
    confidence: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Strength of evidence [0.0, 1.0]",
    )

    def __init__(self, frequency: float = 1.0, confidence: float = 0.9, **data) -> None:
        super().__init__(frequency=frequency, confidence=confidence, **data)

    @field_validator("frequency", "confidence", mode="before")
    @classmethod
    def clamp(cls, v: float) -> float:
        """Clamp into [0, 1]; NaN collapses to 0."""
        v = float(v)
        if math.isnan(v):
            return 0.0
        return min(1.0, max(0.0, v))

    # Tolerant equality is not transitive, so truths are not hashable
    __hash__ = None  # type: ignore[assignment]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Truth):
            return NotImplemented
        return (
            abs(self.frequency - other.frequency) < TRUTH_EPSILON
            and abs(self.confidence - other.confidence) < TRUTH_EPSILON
        )

    def __str__(self) -> str:
        return f"%{self.frequency:.2f};{self.confidence:.2f}%"

    @classmethod
    def default_belief(cls) -> Truth:
        return cls(1.0, 0.9)

    @classmethod
    def default_goal(cls) -> Truth:
        return cls(1.0, 0.9)

    @classmethod
    def uncertainty(cls) -> Truth:
        """Truth carrying no evidence."""
        return cls(0.5, 0.0)

    @classmethod
    def falsehood(cls) -> Truth:
        return cls(0.0, 0.9)

    @classmethod
    def from_evidence(cls, frequency: float, weight: float) -> Truth:
        """Create a truth value from an amount of evidence.

        Args:
            frequency: Proportion of positive evidence
            weight: Total evidence ``w``; infinite weight gives confidence 1

        Returns:
            Truth with ``c = w / (w + 1)``
        """
        if math.isinf(weight):
            return cls(frequency, 1.0)
        weight = max(0.0, weight)
        return cls(frequency, weight / (weight + 1.0))

    def evidence(self) -> float:
        """Amount of evidence ``c / (1 - c)``; infinite at confidence 1."""
        if self.confidence >= 1.0:
            return math.inf
        return self.confidence / (1.0 - self.confidence)

    def expectation(self) -> float:
        """Expected frequency, pulled towards 0.5 by low confidence."""
        return self.confidence * (self.frequency - 0.5) + 0.5

    def negate(self) -> Truth:
        """Return negated truth value (frequency inverted, confidence preserved)."""
        return Truth(1.0 - self.frequency, self.confidence)

    def is_positive(self) -> bool:
        return self.frequency > 0.5
