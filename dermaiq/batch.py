"""
Score many products from a long-format CSV of classified ingredients.

Input columns: product, name, risk_level, risk_reasons, category (optional).
risk_reasons holds zero or more tags separated by "|", ";" or ",".
Each output row is one product with its score, band and ceiling cause; products
whose classification is rejected keep an error message instead of a score.
"""

from __future__ import annotations

import argparse
import logging
import re
from typing import Dict, List, Optional

# Pandas is used for CSV I/O and DataFrame assembly.
import pandas as pd

from .errors import ScoringError
from .models import Ingredient
from .scoring_engine import ScoringEngine

REQUIRED_COLUMNS = ("product", "name", "risk_level")
OUTPUT_COLUMNS = [
    "product",
    "score",
    "band",
    "ingredient_count",
    "penalty_total",
    "amplified",
    "ceiling_cause",
    "error",
]

log = logging.getLogger(__name__)


def _split_reasons(text: str) -> List[str]:
    return [tag.strip() for tag in re.split(r"[|;,]", text or "") if tag.strip()]


def score_frame(frame: pd.DataFrame, engine: Optional[ScoringEngine] = None) -> pd.DataFrame:
    """Group rows by product and score each group."""
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")
    engine = engine or ScoringEngine()
    frame = frame.fillna("")

    records: List[Dict[str, object]] = []
    for product, group in frame.groupby("product", sort=True):
        record: Dict[str, object] = {col: None for col in OUTPUT_COLUMNS}
        record["product"] = product
        try:
            ingredients = [
                Ingredient(
                    name=row["name"],
                    risk_level=row["risk_level"],
                    risk_reasons=_split_reasons(str(row.get("risk_reasons", ""))),
                    category=str(row.get("category", "")) or None,
                )
                for _, row in group.iterrows()
                if str(row["name"]).strip()
            ]
            scored = engine.score(ingredients)
        except ScoringError as exc:
            log.warning("Could not score %r: %s", product, exc)
            record["error"] = str(exc)
            records.append(record)
            continue
        record.update(
            score=scored.score,
            band=scored.band.value,
            ingredient_count=scored.ingredient_count,
            penalty_total=scored.penalty_total,
            amplified=scored.amplified,
            ceiling_cause=scored.ceiling_cause.name if scored.ceiling_cause else "",
            error="",
        )
        records.append(record)
    return pd.DataFrame(records, columns=OUTPUT_COLUMNS)


def score_csv(input_path: str, output_path: str) -> pd.DataFrame:
    frame = pd.read_csv(input_path, dtype=str, keep_default_na=False)
    result = score_frame(frame)
    result.to_csv(output_path, index=False)
    log.info("Scored %d products into %s", len(result), output_path)
    return result


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Score products from a classified-ingredients CSV")
    parser.add_argument("--input", required=True, help="Long-format ingredients CSV")
    parser.add_argument("--output", required=True, help="Where to write one row per product")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    result = score_csv(args.input, args.output)
    print(f"Scored {len(result)} products -> {args.output}")


if __name__ == "__main__":
    main()
