"""
Risk classifiers: annotate each ingredient with a risk level, reason tags and a
display category. Classifiers never compute the score.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from .errors import ClassificationError
from .models import Classification, Ingredient, ProductIdentity
from .openai_client import OpenAIClient
from .prompts import CLASSIFIER_SYSTEM, CLASSIFIER_USER

log = logging.getLogger(__name__)


class RiskClassifier:
    """
    Base interface for any ingredient risk classifier (model, curated table, cache).
    """

    def classify(self, product: ProductIdentity) -> Classification:
        raise NotImplementedError


class StaticRiskClassifier(RiskClassifier):
    """
    Looks ingredients up in a prepared table keyed by name. Unknown ingredients
    are an error rather than a silent green.
    """

    def __init__(self, table: Mapping[str, Ingredient]):
        self.table = {" ".join(name.lower().split()): ing for name, ing in table.items()}

    def classify(self, product: ProductIdentity) -> Classification:
        ingredients: List[Ingredient] = []
        missing: List[str] = []
        for name in product.ingredients:
            found = self.table.get(" ".join(name.lower().split()))
            if found is None:
                missing.append(name)
            else:
                ingredients.append(found)
        if missing:
            raise ClassificationError(f"No classification for: {', '.join(missing)}")
        return Classification(ingredients=ingredients)


class OpenAIRiskClassifier(RiskClassifier):
    def __init__(self, client: OpenAIClient):
        self.client = client
        self.log = logging.getLogger(self.__class__.__name__)

    def classify(self, product: ProductIdentity) -> Classification:
        user = CLASSIFIER_USER % {
            "product_type": product.product_type,
            "product_name": product.name,
            "count": len(product.ingredients),
            "ingredients": ", ".join(product.ingredients),
        }
        data = self.client.json_call(CLASSIFIER_SYSTEM, user, max_tokens=3500)
        classification = parse_classification(data)

        classified = {ing.key for ing in classification.ingredients}
        unclassified = [
            name for name in product.ingredients if " ".join(name.lower().split()) not in classified
        ]
        if unclassified:
            self.log.warning(
                "Classifier skipped %d of %d ingredients for %r: %s",
                len(unclassified),
                len(product.ingredients),
                product.name,
                ", ".join(unclassified[:10]),
            )
        return classification


def parse_classification(data: object) -> Classification:
    """
    Build a Classification from the classifier's JSON answer. Malformed risk
    levels raise InvalidRiskLevel; structural problems raise ClassificationError.
    """
    if not isinstance(data, dict):
        raise ClassificationError("Classifier response is not a JSON object")
    entries = data.get("ingredients")
    if not isinstance(entries, list):
        raise ClassificationError("Classifier response has no 'ingredients' array")

    ingredients: List[Ingredient] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ClassificationError(f"ingredients[{i}] is not an object: {entry!r}")
        ingredients.append(Ingredient.from_dict(entry))

    verdict: Optional[str] = data.get("verdict")
    if verdict is not None and not isinstance(verdict, str):
        log.warning("Ignoring non-text verdict of type %s", type(verdict).__name__)
        verdict = None
    return Classification(ingredients=ingredients, verdict=verdict or None)
