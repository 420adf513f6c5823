"""
Interactive helper to score a product without preparing a JSON file.
Workflow:
- Ask language first so all prompts/output localize correctly.
- Prompt for the product name, then each ingredient with numbered menus for its
  risk level, reasons and display category.
- Score with the ScoringEngine, print the formatted report, and log history.

Usage:
    python simple_cli.py
"""
import sys
from typing import Callable, List, Optional

from dermaiq import (
    AnalysisResult,
    HistoryStore,
    Ingredient,
    ProductIdentity,
    RiskLevel,
    RiskReason,
    ScoringEngine,
    Settings,
)
from dermaiq.categories import CATEGORY_ORDER, category_label
from main import _t, render_text_result

InputFn = Callable[[str], str]


def prompt_choices(
    options: List[str], title: str, lang: str, multiple: bool, read: InputFn = input
) -> List[int]:
    """
    Console-friendly "dropdown": show numbered options and let the user pick.
    Returns zero-based indices; blank input picks nothing.
    """
    print("\n" + title)
    for idx, label in enumerate(options, start=1):
        print(f"  {idx:2d}. {label}")

    while True:
        raw = read(_t("selection_prompt", lang)).strip()
        if not raw:
            return []
        try:
            indices = [int(token) for token in raw.replace(" ", "").split(",") if token.strip()]
        except ValueError:
            print(_t("select_error_numbers", lang))
            continue

        invalid = [i for i in indices if i < 1 or i > len(options)]
        if invalid or (not multiple and len(indices) > 1):
            print(_t("select_error_range", lang).format(invalid=invalid or indices))
            continue
        return [i - 1 for i in indices]


def prompt_level(lang: str, read: InputFn = input) -> RiskLevel:
    levels = list(RiskLevel)
    labels = [f"{lvl.value} ({_t('level_' + lvl.value, lang)})" for lvl in levels]
    while True:
        picked = prompt_choices(labels, _t("select_level", lang), lang, multiple=False, read=read)
        if picked:
            return levels[picked[0]]


def prompt_ingredient(name: str, lang: str, read: InputFn = input) -> Ingredient:
    level = prompt_level(lang, read=read)
    reasons: List[RiskReason] = []
    if level != RiskLevel.GREEN:
        options = [r for r in RiskReason if r != RiskReason.OTHER]
        picked = prompt_choices(
            [r.value for r in options], _t("select_reasons", lang), lang, multiple=True, read=read
        )
        reasons = [options[i] for i in picked]
    picked = prompt_choices(
        [category_label(code, lang) for code in CATEGORY_ORDER],
        _t("select_category", lang),
        lang,
        multiple=False,
        read=read,
    )
    category = category_label(CATEGORY_ORDER[picked[0]]) if picked else None
    return Ingredient(name=name, risk_level=level, risk_reasons=reasons, category=category)


def collect_ingredients(lang: str, read: InputFn = input) -> List[Ingredient]:
    ingredients: List[Ingredient] = []
    while True:
        name = read(_t("prompt_ingredient", lang)).strip()
        if not name:
            return ingredients
        ingredients.append(prompt_ingredient(name, lang, read=read))


def main(read: InputFn = input, history: Optional[HistoryStore] = None) -> int:
    lang = read(_t("prompt_language", "en")).strip() or "en"
    print(_t("cli_title", lang))
    product_name = read(_t("prompt_product", lang)).strip() or "Manual entry"
    ingredients = collect_ingredients(lang, read=read)
    if not ingredients:
        print(_t("no_ingredients", lang))
        return 1

    scored = ScoringEngine().score(ingredients)
    result = AnalysisResult(
        product=ProductIdentity(
            name=product_name,
            ingredients=[ing.name for ing in ingredients],
            source="manual",
        ),
        scored=scored,
        ingredients=ingredients,
    )
    print()
    print(render_text_result(result, lang=lang))

    # Persist a history row matching the main CLI format for consistency.
    history = history or HistoryStore(Settings.from_env().history_path)
    history.append(result, command="simple_cli")
    return 0


if __name__ == "__main__":
    sys.exit(main())
