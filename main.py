"""
CLI entrypoint to score a cosmetic product.

Flow:
- Parse user inputs (classified-ingredients JSON file or product photo, output
  format, language, history options).
- For a photo, identify the product and classify its ingredients with the
  configured model provider; for a JSON file, use the classification as given.
- Score the ingredients with the deterministic ScoringEngine.
- Render either a text dashboard or JSON payload and append a history record.
"""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from dermaiq import (
    AnalysisResult,
    Classification,
    DermaIQError,
    HistoryStore,
    OcrSpaceOracle,
    OpenAIAlternativeSuggester,
    OpenAIAPIError,
    OpenAIClient,
    OpenAIProductOracle,
    OpenAIRiskClassifier,
    ProductAnalyzer,
    ProductIdentity,
    ProductRejected,
    ScoringEngine,
    Settings,
)
from dermaiq.categories import category_label, resolve_category
from dermaiq.classifier import parse_classification
from dermaiq.models import PenaltyDetail

# Simple i18n table for CLI output (extendable with more locales).
TRANSLATIONS = {
    "en": {
        "cli_title": "=== DermaIQ Product Scorer ===",
        "prompt_language": "Preferred language (e.g. en, pt) [en]: ",
        "prompt_product": "Product name: ",
        "prompt_ingredient": "Ingredient name (blank to finish): ",
        "select_level": "Risk level:",
        "select_reasons": "Risk reasons (comma-separated numbers, blank for none):",
        "select_category": "Display category (number, blank for none):",
        "selection_prompt": "Your selection: ",
        "select_error_numbers": "Use numbers from the list (e.g. 1,3,5).",
        "select_error_range": "Choices out of range: {invalid}. Try again.",
        "no_ingredients": "No ingredients entered; nothing to score.",
        "quick_view": "=== Quick view ===",
        "details": "=== Details ===",
        "score": "Score",
        "worst_ingredient": "Sets the ceiling",
        "amplified": "Few ingredients: every penalty weighted x1.5",
        "section_positive": "What's good in it",
        "section_negative": "What to watch",
        "verdict": "Verdict",
        "alternative": "Healthier alternative",
        "per_ingredient_breakdown": "Per-ingredient penalties:",
        "could_not_score": "Could not score this product",
        "band_excellent": "Excellent",
        "band_good": "Good",
        "band_fair": "Fair",
        "band_poor": "Poor",
        "band_very_poor": "Very Poor",
        "level_green": "risk-free",
        "level_yellow": "low risk",
        "level_orange": "moderate risk",
        "level_red": "hazardous",
    },
    "pt": {
        "cli_title": "=== DermaIQ Avaliador de Produtos ===",
        "prompt_language": "Idioma preferido (ex.: en, pt) [en]: ",
        "prompt_product": "Nome do produto: ",
        "prompt_ingredient": "Nome do ingrediente (vazio para terminar): ",
        "select_level": "Nível de risco:",
        "select_reasons": "Motivos de risco (números separados por vírgula, vazio para nenhum):",
        "select_category": "Categoria (número, vazio para nenhuma):",
        "selection_prompt": "A sua escolha: ",
        "select_error_numbers": "Use os números da lista (ex.: 1,3,5).",
        "select_error_range": "Opções fora do intervalo: {invalid}. Tente novamente.",
        "no_ingredients": "Nenhum ingrediente introduzido; nada para avaliar.",
        "quick_view": "=== Visão rápida ===",
        "details": "=== Detalhes ===",
        "score": "Pontuação",
        "worst_ingredient": "Define o teto",
        "amplified": "Poucos ingredientes: cada penalização pesa x1,5",
        "section_positive": "O que tem de bom",
        "section_negative": "A ter em atenção",
        "verdict": "Veredito",
        "alternative": "Alternativa mais saudável",
        "per_ingredient_breakdown": "Penalizações por ingrediente:",
        "could_not_score": "Não foi possível avaliar este produto",
        "band_excellent": "Excelente",
        "band_good": "Bom",
        "band_fair": "Razoável",
        "band_poor": "Fraco",
        "band_very_poor": "Muito fraco",
        "level_green": "sem risco",
        "level_yellow": "risco baixo",
        "level_orange": "risco moderado",
        "level_red": "perigoso",
    },
}


def _t(key: str, lang: str = "en") -> str:
    """Translate a key to the requested language with English fallback."""
    bundle = TRANSLATIONS.get(lang, TRANSLATIONS["en"])
    return bundle.get(key) or TRANSLATIONS["en"].get(key, key)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Configure and parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Score a cosmetic product's ingredients")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--ingredients",
        help="JSON file with classified ingredients (a list, or an object with product_name and ingredients)",
    )
    source.add_argument("--image", help="Product photo to identify, classify and score")
    parser.add_argument(
        "--oracle",
        choices=["openai", "ocr"],
        default="openai",
        help="How to read the photo: vision model or OCR.space label text (default: openai)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--lang",
        default="en",
        help="Language for output labels (e.g. en, pt). Defaults to en.",
    )
    parser.add_argument("--history-path", default=None, help="CSV history file (default from DERMAIQ_HISTORY_PATH)")
    parser.add_argument("--no-history", action="store_true", default=False, help="Do not append a history row")
    parser.add_argument("--user-id", default=None, help="User the history row belongs to")
    parser.add_argument("--log-level", default=None, help="Logging level (default from DERMAIQ_LOG_LEVEL)")
    return parser.parse_args(argv)


def render_bar(score: float, width: int = 30) -> str:
    """ASCII bar to visualize a 0-100 score."""
    filled = int((score / 100.0) * width)
    return f"[{'#' * filled}{'.' * (width - filled)}]"


def band_label(band, lang: str = "en") -> str:
    key = "band_" + band.value.lower().replace(" ", "_")
    return _t(key, lang)


def _level_label(level, lang: str) -> str:
    return _t(f"level_{level.value}", lang)


def _group_title(category: str, lang: str) -> str:
    code = resolve_category(category)
    return category_label(code, lang) if code else category


def render_text_result(result: AnalysisResult, lang: str = "en") -> str:
    """Pretty-print a scored product in a text-first dashboard layout."""
    scored = result.scored
    lines = [_t("quick_view", lang)]
    headline = result.product.name
    if result.product.product_type and result.product.product_type != "unknown":
        headline += f" · {result.product.product_type}"
    lines.append(headline)
    lines.append(
        f"{_t('score', lang)}: {scored.score}/100 ({band_label(scored.band, lang)}) "
        f"{render_bar(scored.score)}"
    )
    if scored.ceiling_cause:
        cause = scored.ceiling_cause
        reasons = ", ".join(sorted(r.value for r in cause.risk_reasons))
        lines.append(
            f"{_t('worst_ingredient', lang)}: {cause.name} "
            f"({_level_label(cause.risk_level, lang)}{': ' + reasons if reasons else ''})"
        )
    if scored.amplified:
        lines.append(_t("amplified", lang))

    for title_key, groups in (
        ("section_positive", scored.positive),
        ("section_negative", scored.negative),
    ):
        if not groups:
            continue
        lines.append(f"\n{_t(title_key, lang)}:")
        for group in groups:
            lines.append(f"  {_group_title(group.category, lang)}")
            for item in group.items:
                note = f" - {item.note}" if item.note else ""
                level = "" if item.is_positive else f" [{_level_label(item.risk_level, lang)}]"
                lines.append(f"    - {item.name}{level}{note}")

    if result.verdict:
        lines.append(f"\n{_t('verdict', lang)}: {result.verdict}")
    if result.alternative:
        alt = result.alternative
        lines.append(
            f"\n{_t('alternative', lang)}: {alt.product_name} ({alt.brand}) "
            f"~{alt.estimated_score}/100 | {alt.reason}"
        )

    # Detailed reasoning for expert users
    lines.append("\n" + _t("details", lang))
    lines.append(_t("per_ingredient_breakdown", lang))
    for detail in _sorted_details(scored.penalties):
        ing = detail.ingredient
        reasons = ", ".join(sorted(r.value for r in ing.risk_reasons)) or "-"
        lines.append(
            f"  - {ing.name}: {ing.risk_level.value} ({reasons}) "
            f"-{detail.penalty:g}"
        )
    return "\n".join(lines)


def _sorted_details(details: Iterable[PenaltyDetail]) -> List[PenaltyDetail]:
    """Sort by descending penalty then name for deterministic output."""
    return sorted(details, key=lambda d: (-d.penalty, d.ingredient.key))


def load_ingredients_file(path: Path) -> Tuple[ProductIdentity, Classification]:
    """
    Read a classified-ingredients JSON file. Accepts a bare list of ingredients or
    an object with product_name, product_type, ingredients and verdict.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"ingredients": data}
    classification = parse_classification(data)
    product = ProductIdentity(
        name=str(data.get("product_name") or path.stem),
        product_type=str(data.get("product_type") or "unknown"),
        ingredients=[ing.name for ing in classification.ingredients],
        confidence="high",
        source=f"file:{path.name}",
    )
    return product, classification


def score_file(path: Path, engine: ScoringEngine) -> AnalysisResult:
    product, classification = load_ingredients_file(path)
    scored = engine.score(classification.ingredients)
    return AnalysisResult(
        product=product,
        scored=scored,
        ingredients=list(classification.ingredients),
        verdict=classification.verdict,
    )


def analyze_image(path: Path, oracle_kind: str, settings: Settings, engine: ScoringEngine) -> AnalysisResult:
    client = OpenAIClient.from_settings(settings)
    if oracle_kind == "ocr":
        if not settings.ocr_space_api_key:
            raise RuntimeError("Missing OCR_SPACE_API_KEY")
        oracle = OcrSpaceOracle(api_key=settings.ocr_space_api_key)
    else:
        oracle = OpenAIProductOracle(client)
    analyzer = ProductAnalyzer(
        oracle=oracle,
        classifier=OpenAIRiskClassifier(client),
        engine=engine,
        suggester=OpenAIAlternativeSuggester(client),
    )
    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return analyzer.analyze(path.read_bytes(), mime_type)


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint: score, render output, and log history."""
    args = parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    engine = ScoringEngine()

    try:
        if args.ingredients:
            result = score_file(Path(args.ingredients), engine)
        else:
            result = analyze_image(Path(args.image), args.oracle, settings, engine)
    except ProductRejected as exc:
        print(f"{exc.message}. {exc.details or ''}".strip(), file=sys.stderr)
        return 1
    except (DermaIQError, OpenAIAPIError, RuntimeError, ValueError, OSError) as exc:
        print(f"{_t('could_not_score', args.lang)}: {exc}", file=sys.stderr)
        return 1

    if args.format == "json":
        payload = result.to_dict()
        payload["scoring"] = result.scored.to_dict()
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(render_text_result(result, lang=args.lang))

    if not args.no_history:
        history = HistoryStore(args.history_path or settings.history_path)
        history.append(result, user_id=args.user_id, command="main_cli")
    return 0


if __name__ == "__main__":
    sys.exit(main())
