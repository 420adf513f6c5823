import pytest

from dermaiq import (
    Classification,
    EmptyIngredientList,
    HealthierAlternative,
    Ingredient,
    OpenAIAPIError,
    ProductAnalyzer,
    ProductIdentity,
    ProductOracle,
)


class FakeOracle(ProductOracle):
    def __init__(self, identity):
        self.identity = identity
        self.seen = []

    def identify(self, image_bytes, mime_type="image/jpeg"):
        self.seen.append((image_bytes, mime_type))
        return self.check(self.identity)


class FakeClassifier:
    def __init__(self, ingredients, verdict="Honest verdict."):
        self.classification = Classification(ingredients=ingredients, verdict=verdict)

    def classify(self, product):
        return self.classification


class FakeSuggester:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def suggest(self, product, scored):
        self.calls.append((product, scored))
        if self.error:
            raise self.error
        return HealthierAlternative("Clean Cream", "GoodCo", 85, "Fragrance free")


IDENTITY = ProductIdentity(
    name="Hydra Cream",
    product_type="skincare",
    ingredients=["Aqua", "Glycerin", "Parfum"],
)

RISKY = [
    Ingredient("Aqua", "green"),
    Ingredient("Glycerin", "green", category="Moisturizers & Hydrators", note="Keeps skin hydrated"),
    Ingredient("Parfum", "orange", ["allergen"], category="Fragrances & Scents", note="Common allergen"),
]


def test_low_score_gets_an_alternative():
    suggester = FakeSuggester()
    oracle = FakeOracle(IDENTITY)
    analyzer = ProductAnalyzer(oracle, FakeClassifier(RISKY), suggester=suggester)

    result = analyzer.analyze(b"img", "image/png")

    assert oracle.seen == [(b"img", "image/png")]
    assert result.scored.score == 49
    assert len(suggester.calls) == 1
    assert result.alternative.product_name == "Clean Cream"

    data = result.to_dict()
    assert data["product_name"] == "Hydra Cream"
    assert data["detected_ingredients"] == ["Aqua", "Glycerin", "Parfum"]
    assert data["score"] == 49
    assert data["band"] == "Fair"
    assert data["verdict"] == "Honest verdict."
    assert data["positive_ingredients"] == [
        {
            "category": "Moisturizers & Hydrators",
            "items": [{"name": "Glycerin", "risk_level": "green", "benefit": "Keeps skin hydrated"}],
        }
    ]
    assert data["negative_ingredients"][0]["items"][0]["concern"] == "Common allergen"
    assert data["healthier_alternative"]["estimated_score"] == 85


def test_good_score_skips_alternative():
    suggester = FakeSuggester()
    analyzer = ProductAnalyzer(
        FakeOracle(IDENTITY), FakeClassifier([Ingredient("Aqua", "green"), Ingredient("Glycerin", "green")]), suggester=suggester
    )
    result = analyzer.analyze(b"img")
    assert result.scored.score == 100
    assert suggester.calls == []
    assert result.to_dict()["healthier_alternative"] is None


def test_alternative_failure_does_not_fail_analysis():
    suggester = FakeSuggester(error=OpenAIAPIError(500, "api_error", "boom"))
    analyzer = ProductAnalyzer(FakeOracle(IDENTITY), FakeClassifier(RISKY), suggester=suggester)
    result = analyzer.analyze(b"img")
    assert result.alternative is None
    assert result.scored.score == 49


def test_empty_classification_propagates():
    analyzer = ProductAnalyzer(FakeOracle(IDENTITY), FakeClassifier([]))
    with pytest.raises(EmptyIngredientList):
        analyzer.analyze(b"img")


def test_assess_product_without_oracle_call():
    oracle = FakeOracle(IDENTITY)
    analyzer = ProductAnalyzer(oracle, FakeClassifier(RISKY))
    result = analyzer.assess_product(IDENTITY)
    assert oracle.seen == []
    assert result.scored.ceiling_cause.name == "Parfum"
