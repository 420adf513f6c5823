"""
Ingredient display categories and helpers.

Defines the controlled vocabulary used to group positive and negative
ingredients, with English and European Portuguese labels and common aliases a
classifier may answer with, plus utilities to resolve free-form category text.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, List, Optional

# Order matters: grouped output follows this order.
INGREDIENT_CATEGORIES: Dict[str, Dict[str, object]] = {
    "MOISTURIZERS": {
        "en": "Moisturizers & Hydrators",
        "pt": "Hidratantes",
        "aliases": ["moisturizers", "moisturiser", "humectants", "emollients", "hydrators"],
    },
    "VITAMINS": {
        "en": "Vitamins & Antioxidants",
        "pt": "Vitaminas e antioxidantes",
        "aliases": ["vitamins", "antioxidants"],
    },
    "SOOTHING": {
        "en": "Soothing & Calming Agents",
        "pt": "Agentes calmantes",
        "aliases": ["soothing agents", "calming agents", "soothing"],
    },
    "NATURAL_EXTRACTS": {
        "en": "Natural Extracts & Oils",
        "pt": "Extratos e óleos naturais",
        "aliases": ["natural extracts", "plant extracts", "botanical extracts", "oils"],
    },
    "SUN_PROTECTION": {
        "en": "Sun Protection",
        "pt": "Proteção solar",
        "aliases": ["uv filters", "sunscreen agents", "spf"],
    },
    "SKIN_REPAIR": {
        "en": "Skin Repair",
        "pt": "Reparação da pele",
        "aliases": ["barrier repair", "repair"],
    },
    "FRAGRANCES": {
        "en": "Fragrances & Scents",
        "pt": "Fragrâncias e perfumes",
        "aliases": ["fragrances", "fragrance", "parfum", "perfume"],
    },
    "PRESERVATIVES": {
        "en": "Preservatives & Stabilizers",
        "pt": "Conservantes e estabilizantes",
        "aliases": ["preservatives", "stabilizers", "stabilisers"],
    },
    "HARSH_CLEANSERS": {
        "en": "Harsh Cleansing Agents (Sulfates)",
        "pt": "Agentes de limpeza agressivos (sulfatos)",
        "aliases": ["harsh cleansing agents", "sulfates", "sulphates", "surfactants"],
    },
    "ALLERGENS": {
        "en": "Potential Allergens",
        "pt": "Potenciais alérgenos",
        "aliases": ["allergens"],
    },
    "SILICONES": {
        "en": "Silicones & Film Formers",
        "pt": "Silicones e formadores de filme",
        "aliases": ["silicones", "film formers"],
    },
    "COLORANTS": {
        "en": "Colorants & Dyes",
        "pt": "Corantes",
        "aliases": ["colorants", "colourants", "dyes", "pigments"],
    },
    "PH_ADJUSTERS": {
        "en": "pH Adjusters & Buffers",
        "pt": "Reguladores de pH",
        "aliases": ["ph adjusters", "buffers", "ph adjuster"],
    },
}

CATEGORY_ORDER: List[str] = list(INGREDIENT_CATEGORIES)


def _normalize(text: str) -> str:
    """Lowercase, strip accents, and collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def _build_synonym_mapping(categories: Dict[str, Dict[str, object]]) -> Dict[str, str]:
    """Map any synonym (label, alias, code) to the canonical category code."""
    mapping: Dict[str, str] = {}
    for code, meta in categories.items():
        mapping[_normalize(code)] = code
        mapping[_normalize(code.replace("_", " "))] = code
        for lang, label in meta.items():
            if lang == "aliases":
                continue
            mapping[_normalize(str(label))] = code
        for alias in meta.get("aliases", []):
            mapping[_normalize(alias)] = code
    return mapping


SYNONYM_TO_CODE: Dict[str, str] = _build_synonym_mapping(INGREDIENT_CATEGORIES)


def resolve_category(text: Optional[str]) -> Optional[str]:
    """
    Resolve free-form category text (any supported language) to a canonical code.
    Returns None when the text is outside the vocabulary.
    """
    if not text:
        return None
    return SYNONYM_TO_CODE.get(_normalize(text))


def category_label(code: str, lang: str = "en") -> str:
    """Human-friendly category label in the requested language, English fallback."""
    if not code:
        return ""
    meta = INGREDIENT_CATEGORIES.get(code.upper())
    if not meta:
        return code
    return str(meta.get(lang) or meta.get("en") or code)
