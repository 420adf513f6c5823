"""
Shared domain models used by the scoring engine and its collaborators.

- RiskLevel: ordinal severity tier assigned to an ingredient (green..red).
- RiskReason: why an ingredient is risky (carcinogen, endocrine, ...).
- Band: qualitative label derived from a 0-100 score.
- Ingredient: one classified substance, immutable.
- ScoredProduct: scored output of one ingredient list.
- ProductIdentity / Classification / HealthierAlternative / AnalysisResult:
  payloads exchanged with the oracle, the classifier and the presentation layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .errors import ClassificationError, InvalidRiskLevel

log = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: object, ingredient: Optional[str] = None) -> "RiskLevel":
        """
        Strictly map classifier output to a level. Case and surrounding whitespace
        are tolerated; anything else raises InvalidRiskLevel.
        """
        if isinstance(value, RiskLevel):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidRiskLevel(value, ingredient=ingredient)


_SEVERITY: Dict[RiskLevel, int] = {
    RiskLevel.GREEN: 0,
    RiskLevel.YELLOW: 1,
    RiskLevel.ORANGE: 2,
    RiskLevel.RED: 3,
}


class RiskReason(str, Enum):
    CARCINOGEN = "carcinogen"
    ENDOCRINE = "endocrine"
    ALLERGEN = "allergen"
    IRRITANT = "irritant"
    POLLUTANT = "pollutant"
    OTHER = "other"

    @property
    def is_severe(self) -> bool:
        return self in (RiskReason.CARCINOGEN, RiskReason.ENDOCRINE)

    @classmethod
    def parse_many(cls, values: object) -> FrozenSet["RiskReason"]:
        """
        Normalize a reason tag, or a list of tags, into a frozenset.
        "none" and blanks mean no reason; unknown tags become OTHER.
        """
        if values is None:
            return frozenset()
        if isinstance(values, (str, RiskReason)):
            values = [values]
        elif not isinstance(values, (list, tuple, set, frozenset)):
            raise ClassificationError(
                f"risk_reasons must be a tag or a list of tags, got {type(values).__name__}"
            )
        reasons = set()
        for value in values:
            if isinstance(value, RiskReason):
                reasons.add(value)
                continue
            tag = str(value).strip().lower()
            if not tag or tag == "none":
                continue
            try:
                reasons.add(cls(tag))
            except ValueError:
                log.warning("Unknown risk reason %r treated as 'other'", value)
                reasons.add(cls.OTHER)
        return frozenset(reasons)


class Band(str, Enum):
    VERY_POOR = "Very Poor"
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"

    @classmethod
    def for_score(cls, score: float) -> "Band":
        if score >= 80:
            return cls.EXCELLENT
        if score >= 60:
            return cls.GOOD
        if score >= 40:
            return cls.FAIR
        if score >= 20:
            return cls.POOR
        return cls.VERY_POOR


@dataclass(frozen=True)
class Ingredient:
    """
    One classified substance. Strings are accepted for risk_level and
    risk_reasons and normalized on construction. risk_level has no default:
    leaving it out raises InvalidRiskLevel.
    """

    name: str
    risk_level: Optional[RiskLevel] = None
    risk_reasons: FrozenSet[RiskReason] = field(default_factory=frozenset)
    category: Optional[str] = None
    note: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name).strip())
        object.__setattr__(
            self, "risk_level", RiskLevel.parse(self.risk_level, ingredient=self.name)
        )
        object.__setattr__(self, "risk_reasons", RiskReason.parse_many(self.risk_reasons))

    @property
    def key(self) -> str:
        """Identity used for de-duplication: case and whitespace insensitive."""
        return " ".join(self.name.lower().split())

    @property
    def is_positive(self) -> bool:
        return self.risk_level == RiskLevel.GREEN

    @classmethod
    def from_dict(cls, data: Mapping) -> "Ingredient":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ClassificationError(f"Ingredient entry without a name: {dict(data)!r}")
        reasons = data.get("risk_reasons")
        if reasons is None:
            reasons = data.get("reasons")
        note = data.get("note") or data.get("benefit") or data.get("concern")
        return cls(
            name=name,
            risk_level=data.get("risk_level"),
            risk_reasons=reasons,
            category=(str(data["category"]).strip() or None) if data.get("category") else None,
            note=str(note) if note else None,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "risk_level": self.risk_level.value,
            "risk_reasons": sorted(reason.value for reason in self.risk_reasons),
            "category": self.category,
            "note": self.note,
        }


@dataclass(frozen=True)
class PenaltyDetail:
    ingredient: Ingredient
    base_penalty: float
    penalty: float


@dataclass(frozen=True)
class IngredientGroup:
    category: str
    items: Tuple[Ingredient, ...]

    def to_dict(self) -> Dict[str, object]:
        items = []
        for item in self.items:
            entry: Dict[str, object] = {
                "name": item.name,
                "risk_level": item.risk_level.value,
            }
            if item.note:
                entry["benefit" if item.is_positive else "concern"] = item.note
            items.append(entry)
        return {"category": self.category, "items": items}


@dataclass(frozen=True)
class ScoredProduct:
    score: int
    band: Band
    ceiling_cause: Optional[Ingredient]
    score_range: Tuple[int, int]
    penalty_total: float
    amplified: bool
    ingredient_count: int
    penalties: Tuple[PenaltyDetail, ...] = ()
    positive: Tuple[IngredientGroup, ...] = ()
    negative: Tuple[IngredientGroup, ...] = ()

    @property
    def needs_alternative(self) -> bool:
        """A healthier substitute should be offered for products under 50."""
        return self.score < 50

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "band": self.band.value,
            "score_range": list(self.score_range),
            "ceiling_cause": self.ceiling_cause.to_dict() if self.ceiling_cause else None,
            "penalty_total": self.penalty_total,
            "amplified": self.amplified,
            "ingredient_count": self.ingredient_count,
            "needs_alternative": self.needs_alternative,
            "penalties": [
                {"name": d.ingredient.name, "base": d.base_penalty, "applied": d.penalty}
                for d in self.penalties
            ],
            "positive_ingredients": [group.to_dict() for group in self.positive],
            "negative_ingredients": [group.to_dict() for group in self.negative],
        }


@dataclass
class ProductIdentity:
    """
    What the oracle knows about the photographed product.
    """

    name: str
    product_type: str = "unknown"
    ingredients: List[str] = field(default_factory=list)
    confidence: str = "low"
    is_cosmetic: bool = True
    source: str = "unknown"
    raw_payload: Optional[dict] = None


@dataclass
class Classification:
    ingredients: List[Ingredient]
    verdict: Optional[str] = None


@dataclass
class HealthierAlternative:
    product_name: str
    brand: str
    estimated_score: int
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "product_name": self.product_name,
            "brand": self.brand,
            "estimated_score": self.estimated_score,
            "reason": self.reason,
        }


@dataclass
class AnalysisResult:
    product: ProductIdentity
    scored: ScoredProduct
    ingredients: List[Ingredient]
    verdict: Optional[str] = None
    alternative: Optional[HealthierAlternative] = None

    def to_dict(self) -> Dict[str, object]:
        """JSON shape returned to clients and stored in history."""
        return {
            "product_name": self.product.name,
            "product_type": self.product.product_type,
            "detected_ingredients": list(self.product.ingredients)
            or [ing.name for ing in self.ingredients],
            "score": self.scored.score,
            "band": self.scored.band.value,
            "positive_ingredients": [g.to_dict() for g in self.scored.positive],
            "negative_ingredients": [g.to_dict() for g in self.scored.negative],
            "verdict": self.verdict or "",
            "healthier_alternative": self.alternative.to_dict() if self.alternative else None,
        }


def worst_level(ingredients: Iterable[Ingredient]) -> RiskLevel:
    return max((ing.risk_level for ing in ingredients), key=lambda lvl: lvl.severity)
