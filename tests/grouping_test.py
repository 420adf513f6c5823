"""Display grouping: category vocabulary, positive/negative split, dropped categories."""

from dermaiq import Ingredient, category_label, resolve_category, score


def test_groups_follow_vocabulary_order_and_sort_items():
    items = [
        Ingredient("Parfum", "orange", ["allergen"], category="Fragrances & Scents", note="Can irritate"),
        Ingredient("Phenoxyethanol", "yellow", ["irritant"], category="Preservatives & Stabilizers"),
        Ingredient("Tocopherol", "green", category="Vitamins & Antioxidants", note="Vitamin E"),
        Ingredient("Glycerin", "green", category="Moisturizers & Hydrators"),
        Ingredient("Aloe Vera", "green", category="moisturizers"),
    ]
    result = score(items)

    assert [g.category for g in result.positive] == [
        "Moisturizers & Hydrators",
        "Vitamins & Antioxidants",
    ]
    assert [i.name for i in result.positive[0].items] == ["Aloe Vera", "Glycerin"]
    assert [g.category for g in result.negative] == [
        "Fragrances & Scents",
        "Preservatives & Stabilizers",
    ]


def test_uncategorised_ingredients_are_dropped_from_display_but_scored():
    items = [
        Ingredient("BHT", "orange", ["endocrine"], category="Synthetic Chemicals"),
        Ingredient("Mystery Base", "green"),
        Ingredient("Glycerin", "green", category="Moisturizers & Hydrators"),
        Ingredient("Aqua", "green", category="Water"),
    ]
    result = score(items)

    shown = [i.name for g in result.positive + result.negative for i in g.items]
    assert shown == ["Glycerin"]
    assert result.negative == ()
    assert result.ceiling_cause.name == "BHT"
    assert result.score == 49


def test_group_to_dict_uses_benefit_and_concern():
    items = [
        Ingredient("Parfum", "orange", ["allergen"], category="Fragrances & Scents", note="Can irritate"),
        Ingredient("Tocopherol", "green", category="Vitamins & Antioxidants", note="Vitamin E"),
    ]
    result = score(items)
    assert result.positive[0].to_dict() == {
        "category": "Vitamins & Antioxidants",
        "items": [{"name": "Tocopherol", "risk_level": "green", "benefit": "Vitamin E"}],
    }
    assert result.negative[0].to_dict()["items"][0]["concern"] == "Can irritate"


def test_resolve_category_accepts_labels_aliases_and_portuguese():
    assert resolve_category("Moisturizers & Hydrators") == "MOISTURIZERS"
    assert resolve_category("  SULFATES ") == "HARSH_CLEANSERS"
    assert resolve_category("Proteção solar") == "SUN_PROTECTION"
    assert resolve_category("protecao solar") == "SUN_PROTECTION"
    assert resolve_category("ph adjusters") == "PH_ADJUSTERS"
    assert resolve_category("Synthetic Chemicals") is None
    assert resolve_category(None) is None


def test_category_label_falls_back_to_english():
    assert category_label("COLORANTS", lang="pt") == "Corantes"
    assert category_label("COLORANTS", lang="de") == "Colorants & Dyes"
    assert category_label("UNKNOWN") == "UNKNOWN"
