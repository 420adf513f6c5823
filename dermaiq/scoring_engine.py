"""
Central scoring engine: turns a classified ingredient list into a 0-100 score,
a qualitative band, and grouped positive/negative ingredient listings.

Key stages:
- validate and de-duplicate ingredients (strict risk levels, no double counting)
- derive the admissible score range from the worst ingredient present
- apply one penalty per ingredient (highest reason only), amplified for short lists
- subtract from 100, clamp into the admissible range, round half-up
- group ingredients by display category for presentation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .categories import CATEGORY_ORDER, category_label, resolve_category
from .errors import EmptyIngredientList
from .models import (
    Band,
    Ingredient,
    IngredientGroup,
    PenaltyDetail,
    RiskLevel,
    ScoredProduct,
    worst_level,
)

IngredientInput = Union[Ingredient, Mapping]


PenaltyTable = Tuple[Tuple[RiskLevel, Tuple[float, float]], ...]
RangeTable = Tuple[Tuple[RiskLevel, Tuple[int, int]], ...]

# level -> (carcinogen/endocrine, any other reason)
DEFAULT_PENALTIES: PenaltyTable = (
    (RiskLevel.GREEN, (0.0, 0.0)),
    (RiskLevel.YELLOW, (3.0, 2.0)),
    (RiskLevel.ORANGE, (6.0, 4.0)),
    (RiskLevel.RED, (12.0, 8.0)),
)

DEFAULT_RANGES: RangeTable = (
    (RiskLevel.GREEN, (50, 100)),
    (RiskLevel.YELLOW, (50, 100)),
    (RiskLevel.ORANGE, (0, 49)),
    (RiskLevel.RED, (0, 24)),
)


def _freeze_table(table) -> tuple:
    """Normalize a mapping or pairs into a tuple of (level, bounds) ordered by severity."""
    pairs = table.items() if isinstance(table, Mapping) else table
    frozen = {RiskLevel.parse(level): tuple(bounds) for level, bounds in pairs}
    return tuple(sorted(frozen.items(), key=lambda pair: pair[0].severity))


@dataclass(frozen=True)
class ScoringPolicy:
    """
    EU penalty-based policy. The worst ingredient sets the admissible range and
    every ingredient subtracts its single highest penalty from 100.

    Tables may be passed as mappings; they are stored as tuples of pairs so a
    policy stays immutable and hashable.
    """

    penalties: PenaltyTable = DEFAULT_PENALTIES
    ranges: RangeTable = DEFAULT_RANGES
    few_ingredient_threshold: int = 3
    few_ingredient_factor: float = 1.5
    start_score: float = 100.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "penalties", _freeze_table(self.penalties))
        object.__setattr__(self, "ranges", _freeze_table(self.ranges))

    def penalty_for(self, ingredient: Ingredient) -> float:
        severe, other = dict(self.penalties)[ingredient.risk_level]
        if any(reason.is_severe for reason in ingredient.risk_reasons):
            return severe
        return other

    def range_for(self, level: RiskLevel) -> Tuple[int, int]:
        return dict(self.ranges)[level]

    def amplifies(self, ingredient_count: int) -> bool:
        return ingredient_count <= self.few_ingredient_threshold


class ScoringEngine:
    """
    Pure, stateless scorer. Safe to share between threads and requests.
    Inject a different ScoringPolicy to experiment with other penalty tables.
    """

    def __init__(self, policy: Optional[ScoringPolicy] = None):
        self.policy = policy or ScoringPolicy()
        self.log = logging.getLogger(self.__class__.__name__)

    def score(self, ingredients: Iterable[IngredientInput]) -> ScoredProduct:
        """
        Score a non-empty list of classified ingredients. Raises
        EmptyIngredientList or InvalidRiskLevel instead of guessing.
        """
        items = self.unique_ingredients(ingredients)
        details = self.penalty_breakdown(items)
        penalty_total = sum(detail.penalty for detail in details)
        amplified = self.policy.amplifies(len(items))

        worst = worst_level(items)
        low, high = self.policy.range_for(worst)
        raw = self.policy.start_score - penalty_total
        clamped = min(max(raw, low), high)
        score = self._round(clamped)

        positive, negative = self.group(items)
        scored = ScoredProduct(
            score=score,
            band=Band.for_score(score),
            ceiling_cause=self._ceiling_cause(details, worst),
            score_range=(low, high),
            penalty_total=penalty_total,
            amplified=amplified,
            ingredient_count=len(items),
            penalties=tuple(details),
            positive=positive,
            negative=negative,
        )
        self.log.debug(
            "Scored %d ingredients: worst=%s penalty=%.1f raw=%.1f score=%d",
            len(items),
            worst.value,
            penalty_total,
            raw,
            score,
        )
        return scored

    def unique_ingredients(self, ingredients: Iterable[IngredientInput]) -> List[Ingredient]:
        """
        Validate inputs and collapse duplicate names, keeping the most severe
        entry. The result is sorted by name so scoring ignores input order.
        """
        if ingredients is None:
            raise EmptyIngredientList()
        chosen: Dict[str, Ingredient] = {}
        for item in ingredients:
            ingredient = self._coerce(item)
            current = chosen.get(ingredient.key)
            if current is None or self._rank(ingredient) > self._rank(current):
                chosen[ingredient.key] = ingredient
        if not chosen:
            raise EmptyIngredientList()
        return [chosen[key] for key in sorted(chosen)]

    def penalty_breakdown(self, items: Sequence[Ingredient]) -> List[PenaltyDetail]:
        """Per-ingredient penalties with the few-ingredient amplifier applied."""
        factor = self.policy.few_ingredient_factor if self.policy.amplifies(len(items)) else 1.0
        details: List[PenaltyDetail] = []
        for ingredient in items:
            base = self.policy.penalty_for(ingredient)
            details.append(
                PenaltyDetail(ingredient=ingredient, base_penalty=base, penalty=base * factor)
            )
        return details

    def group(
        self, items: Iterable[Ingredient]
    ) -> Tuple[Tuple[IngredientGroup, ...], Tuple[IngredientGroup, ...]]:
        """
        Split into positive (green) and negative groups keyed by the category
        vocabulary. Ingredients outside the vocabulary are left out of display.
        """
        positive: Dict[str, List[Ingredient]] = {}
        negative: Dict[str, List[Ingredient]] = {}
        for ingredient in items:
            code = resolve_category(ingredient.category)
            if code is None:
                if ingredient.category:
                    self.log.debug(
                        "Category %r for %s is outside the vocabulary; not displayed",
                        ingredient.category,
                        ingredient.name,
                    )
                continue
            bucket = positive if ingredient.is_positive else negative
            bucket.setdefault(code, []).append(ingredient)
        return self._ordered_groups(positive), self._ordered_groups(negative)

    @staticmethod
    def _ordered_groups(buckets: Dict[str, List[Ingredient]]) -> Tuple[IngredientGroup, ...]:
        groups = []
        for code in CATEGORY_ORDER:
            members = buckets.get(code)
            if not members:
                continue
            members = sorted(members, key=lambda ing: (ing.key, ing.name))
            groups.append(IngredientGroup(category=category_label(code), items=tuple(members)))
        return tuple(groups)

    @staticmethod
    def _coerce(item: IngredientInput) -> Ingredient:
        if isinstance(item, Ingredient):
            return item
        if isinstance(item, Mapping):
            return Ingredient.from_dict(item)
        raise TypeError(f"Expected Ingredient or mapping, got {type(item).__name__}")

    def _rank(self, ingredient: Ingredient) -> tuple:
        # Total order so duplicate resolution never depends on input order.
        return (
            ingredient.risk_level.severity,
            self.policy.penalty_for(ingredient),
            tuple(sorted(reason.value for reason in ingredient.risk_reasons)),
            ingredient.category or "",
            ingredient.note or "",
            ingredient.name,
        )

    @staticmethod
    def _ceiling_cause(
        details: Sequence[PenaltyDetail], worst: RiskLevel
    ) -> Optional[Ingredient]:
        if worst not in (RiskLevel.RED, RiskLevel.ORANGE):
            return None
        candidates = [d for d in details if d.ingredient.risk_level == worst]
        candidates.sort(key=lambda d: (-d.base_penalty, d.ingredient.key))
        return candidates[0].ingredient

    @staticmethod
    def _round(value: float) -> int:
        rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return max(0, min(100, rounded))


_default_engine = ScoringEngine()


def score(ingredients: Iterable[IngredientInput]) -> ScoredProduct:
    """Score with the default EU penalty policy."""
    return _default_engine.score(ingredients)
