"""
Healthier-alternative suggestions for products scoring under 50.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import HealthierAlternative, ProductIdentity, ScoredProduct
from .openai_client import OpenAIClient
from .prompts import ALTERNATIVE_SYSTEM, ALTERNATIVE_USER


class AlternativeSuggester:
    def suggest(
        self, product: ProductIdentity, scored: ScoredProduct
    ) -> Optional[HealthierAlternative]:
        raise NotImplementedError


class OpenAIAlternativeSuggester(AlternativeSuggester):
    def __init__(self, client: OpenAIClient):
        self.client = client
        self.log = logging.getLogger(self.__class__.__name__)

    def suggest(
        self, product: ProductIdentity, scored: ScoredProduct
    ) -> Optional[HealthierAlternative]:
        ceiling = scored.ceiling_cause.name if scored.ceiling_cause else "none"
        user = ALTERNATIVE_USER % {
            "product_type": product.product_type,
            "product_name": product.name,
            "score": scored.score,
            "ceiling": ceiling,
        }
        data = self.client.json_call(ALTERNATIVE_SYSTEM, user, max_tokens=500)
        if not isinstance(data, dict) or not data.get("product_name"):
            self.log.warning("No usable alternative for %r", product.name)
            return None
        try:
            estimated = int(round(float(data.get("estimated_score", 0))))
        except (TypeError, ValueError):
            estimated = 0
        return HealthierAlternative(
            product_name=str(data["product_name"]),
            brand=str(data.get("brand") or ""),
            estimated_score=max(0, min(100, estimated)),
            reason=str(data.get("reason") or ""),
        )
