"""
Product analysis pipeline: identify the product from a photo, classify its
ingredients, score them deterministically, and optionally suggest a healthier
alternative. Every collaborator is injected so tests can substitute fakes.
"""

from __future__ import annotations

import logging
from typing import Optional

from .alternatives import AlternativeSuggester
from .classifier import RiskClassifier
from .models import AnalysisResult, ProductIdentity
from .openai_client import OpenAIAPIError
from .oracle import ProductOracle
from .scoring_engine import ScoringEngine


class ProductAnalyzer:
    def __init__(
        self,
        oracle: ProductOracle,
        classifier: RiskClassifier,
        engine: Optional[ScoringEngine] = None,
        suggester: Optional[AlternativeSuggester] = None,
    ):
        self.oracle = oracle
        self.classifier = classifier
        self.engine = engine or ScoringEngine()
        self.suggester = suggester
        self.log = logging.getLogger(self.__class__.__name__)

    def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> AnalysisResult:
        """Photo in, scored analysis out. Oracle and scoring errors propagate."""
        self.log.info("Step 1: identifying product (%d bytes, %s)", len(image_bytes), mime_type)
        product = self.oracle.identify(image_bytes, mime_type)
        return self.assess_product(product)

    def assess_product(self, product: ProductIdentity) -> AnalysisResult:
        """Classify and score an already identified product."""
        self.log.info("Step 2: classifying %d ingredients of %r", len(product.ingredients), product.name)
        classification = self.classifier.classify(product)
        scored = self.engine.score(classification.ingredients)

        alternative = None
        if scored.needs_alternative and self.suggester is not None:
            try:
                alternative = self.suggester.suggest(product, scored)
            except OpenAIAPIError as exc:
                self.log.warning("Alternative lookup failed for %r: %s", product.name, exc)

        self.log.info("Scored %r: %d/100 (%s)", product.name, scored.score, scored.band.value)
        return AnalysisResult(
            product=product,
            scored=scored,
            ingredients=list(classification.ingredients),
            verdict=classification.verdict,
            alternative=alternative,
        )
