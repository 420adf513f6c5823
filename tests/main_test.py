import json

import main
from dermaiq import AnalysisResult, Band, HealthierAlternative, Ingredient, ProductIdentity, score


def write_json(tmp_path, data):
    path = tmp_path / "cream.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


PRODUCT_FILE = {
    "product_name": "Hydra Cream",
    "product_type": "skincare",
    "ingredients": [
        {"name": "Aqua", "risk_level": "green"},
        {"name": "Glycerin", "risk_level": "green", "category": "Moisturizers & Hydrators", "note": "Hydrates"},
        {"name": "Parfum", "risk_level": "orange", "risk_reasons": ["allergen"], "category": "Fragrances & Scents"},
        {"name": "Shea Butter", "risk_level": "green", "category": "Natural Extracts & Oils"},
    ],
    "verdict": "Nice texture, but fragranced.",
}


def test_render_text_result_shows_score_and_groups():
    items = [
        Ingredient("Formaldehyde", "red", ["carcinogen"], category="Preservatives & Stabilizers"),
        Ingredient("Glycerin", "green", category="Moisturizers & Hydrators", note="Hydrates"),
    ]
    result = AnalysisResult(
        product=ProductIdentity(name="Old Shampoo", product_type="haircare"),
        scored=score(items),
        ingredients=items,
        verdict="Avoid.",
        alternative=HealthierAlternative("Clean Shampoo", "GoodCo", 88, "No formaldehyde"),
    )
    text = main.render_text_result(result)

    assert "Old Shampoo · haircare" in text
    assert "Score: 24/100 (Poor)" in text
    assert "Sets the ceiling: Formaldehyde (hazardous: carcinogen)" in text
    assert "Few ingredients" in text
    assert "Moisturizers & Hydrators" in text
    assert "    - Glycerin - Hydrates" in text
    assert "Clean Shampoo (GoodCo) ~88/100" in text
    assert "  - Formaldehyde: red (carcinogen) -18" in text


def test_render_text_result_in_portuguese():
    items = [Ingredient("Glycerin", "green", category="Moisturizers & Hydrators")]
    result = AnalysisResult(product=ProductIdentity(name="Creme"), scored=score(items), ingredients=items)
    text = main.render_text_result(result, lang="pt")
    assert "Pontuação: 100/100 (Excelente)" in text
    assert "Hidratantes" in text


def test_band_label_falls_back_to_english():
    assert main.band_label(Band.VERY_POOR, "pt") == "Muito fraco"
    assert main.band_label(Band.GOOD, "xx") == "Good"


def test_render_bar():
    assert main.render_bar(50, width=10) == "[#####.....]"


def test_main_scores_json_file(tmp_path, capsys):
    path = write_json(tmp_path, PRODUCT_FILE)
    history_path = tmp_path / "history.csv"

    code = main.main(["--ingredients", str(path), "--format", "json", "--history-path", str(history_path)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["product_name"] == "Hydra Cream"
    assert payload["score"] == 49
    assert payload["scoring"]["ceiling_cause"]["name"] == "Parfum"
    assert [g["category"] for g in payload["positive_ingredients"]] == [
        "Moisturizers & Hydrators",
        "Natural Extracts & Oils",
    ]
    assert history_path.exists()


def test_main_accepts_bare_list(tmp_path, capsys):
    path = write_json(tmp_path, [{"name": "Aqua", "risk_level": "green"}])
    code = main.main(["--ingredients", str(path), "--no-history"])
    assert code == 0
    assert "Score: 100/100 (Excellent)" in capsys.readouterr().out


def test_main_reports_invalid_classification(tmp_path, capsys):
    path = write_json(tmp_path, [{"name": "Aqua", "risk_level": "clear"}])
    code = main.main(["--ingredients", str(path), "--no-history"])
    assert code == 1
    assert "Could not score this product" in capsys.readouterr().err


def test_main_reports_empty_list(tmp_path, capsys):
    path = write_json(tmp_path, {"product_name": "Nothing", "ingredients": []})
    code = main.main(["--ingredients", str(path), "--no-history"])
    assert code == 1
    assert "empty" in capsys.readouterr().err
