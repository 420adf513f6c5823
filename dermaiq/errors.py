"""
Error taxonomy for scoring and product analysis.

- ScoringError: the engine refused the classified input (empty list, bad level).
- ProductRejected: the oracle could not produce a scorable cosmetic product.
- ClassificationError: the risk classifier answered with an unusable payload.
"""

from __future__ import annotations

from typing import Optional


class DermaIQError(Exception):
    """Base class for every error raised by the package."""


class ScoringError(DermaIQError, ValueError):
    pass


class EmptyIngredientList(ScoringError):
    """Raised when scoring is invoked with zero ingredients."""

    def __init__(self, message: str = "Cannot score an empty ingredient list"):
        super().__init__(message)


class InvalidRiskLevel(ScoringError):
    """Raised when an ingredient carries a level outside green/yellow/orange/red."""

    def __init__(self, value: object, ingredient: Optional[str] = None):
        self.value = value
        self.ingredient = ingredient
        where = f" for ingredient {ingredient!r}" if ingredient else ""
        super().__init__(
            f"Invalid risk level {value!r}{where}; expected one of green, yellow, orange, red"
        )


class ProductRejected(DermaIQError):
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotCosmeticProduct(ProductRejected):
    pass


class ProductNotIdentified(ProductRejected):
    pass


class ClassificationError(DermaIQError):
    pass
