import pytest

from dermaiq import (
    Band,
    ClassificationError,
    Ingredient,
    InvalidRiskLevel,
    RiskLevel,
    RiskReason,
)


def test_risk_level_parse_is_strict_but_tolerates_case():
    assert RiskLevel.parse(" RED ") == RiskLevel.RED
    assert RiskLevel.parse(RiskLevel.YELLOW) == RiskLevel.YELLOW
    for bad in ("amber", "", None, 3):
        with pytest.raises(InvalidRiskLevel):
            RiskLevel.parse(bad)


def test_severity_order():
    ordered = sorted(RiskLevel, key=lambda lvl: lvl.severity)
    assert ordered == [RiskLevel.GREEN, RiskLevel.YELLOW, RiskLevel.ORANGE, RiskLevel.RED]


def test_reason_parsing():
    assert RiskReason.parse_many(None) == frozenset()
    assert RiskReason.parse_many("none") == frozenset()
    assert RiskReason.parse_many("Carcinogen") == frozenset({RiskReason.CARCINOGEN})
    assert RiskReason.parse_many(["allergen", " irritant", "", "none"]) == frozenset(
        {RiskReason.ALLERGEN, RiskReason.IRRITANT}
    )
    assert RiskReason.parse_many(["bioaccumulative"]) == frozenset({RiskReason.OTHER})
    assert RiskReason.CARCINOGEN.is_severe and RiskReason.ENDOCRINE.is_severe
    assert not RiskReason.POLLUTANT.is_severe


@pytest.mark.parametrize("bad", [5, 2.5, {"tag": "allergen"}])
def test_reason_parsing_rejects_non_list_payloads(bad):
    with pytest.raises(ClassificationError):
        RiskReason.parse_many(bad)
    with pytest.raises(ClassificationError):
        Ingredient.from_dict({"name": "Parfum", "risk_level": "orange", "risk_reasons": bad})


def test_ingredient_requires_risk_level():
    with pytest.raises(InvalidRiskLevel):
        Ingredient("Mystery")
    with pytest.raises(InvalidRiskLevel):
        Ingredient.from_dict({"name": "Mystery"})


@pytest.mark.parametrize(
    "value, band",
    [
        (100, Band.EXCELLENT),
        (80, Band.EXCELLENT),
        (79, Band.GOOD),
        (60, Band.GOOD),
        (59, Band.FAIR),
        (40, Band.FAIR),
        (39, Band.POOR),
        (20, Band.POOR),
        (19, Band.VERY_POOR),
        (0, Band.VERY_POOR),
    ],
)
def test_band_thresholds(value, band):
    assert Band.for_score(value) == band


def test_ingredient_normalizes_inputs():
    item = Ingredient("  Parfum ", "Orange", ["allergen"])
    assert item.name == "Parfum"
    assert item.risk_level == RiskLevel.ORANGE
    assert item.risk_reasons == frozenset({RiskReason.ALLERGEN})
    assert item.key == "parfum"
    assert not item.is_positive
    assert hash(item) == hash(Ingredient("Parfum", RiskLevel.ORANGE, [RiskReason.ALLERGEN]))


def test_ingredient_from_dict():
    item = Ingredient.from_dict(
        {"name": "Tocopherol", "risk_level": "green", "risk_reasons": [], "category": "Vitamins", "benefit": "Vitamin E"}
    )
    assert item.note == "Vitamin E"
    assert item.category == "Vitamins"

    item = Ingredient.from_dict({"name": "SLS", "risk_level": "yellow", "reasons": "irritant", "concern": "Drying"})
    assert item.risk_reasons == frozenset({RiskReason.IRRITANT})
    assert item.note == "Drying"
    assert item.to_dict() == {
        "name": "SLS",
        "risk_level": "yellow",
        "risk_reasons": ["irritant"],
        "category": None,
        "note": "Drying",
    }


def test_ingredient_from_dict_requires_name():
    with pytest.raises(ClassificationError):
        Ingredient.from_dict({"risk_level": "green"})
