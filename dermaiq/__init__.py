"""
DermaIQ package: deterministic scoring of cosmetic ingredient risk classifications.

Expose the main classes so consumers can import directly from the package.
"""

from .models import (
    AnalysisResult,
    Band,
    Classification,
    HealthierAlternative,
    Ingredient,
    IngredientGroup,
    PenaltyDetail,
    ProductIdentity,
    RiskLevel,
    RiskReason,
    ScoredProduct,
)
from .errors import (
    ClassificationError,
    DermaIQError,
    EmptyIngredientList,
    InvalidRiskLevel,
    NotCosmeticProduct,
    ProductNotIdentified,
    ProductRejected,
    ScoringError,
)
from .scoring_engine import ScoringEngine, ScoringPolicy, score
from .categories import category_label, resolve_category
from .analysis import ProductAnalyzer
from .classifier import OpenAIRiskClassifier, RiskClassifier, StaticRiskClassifier
from .oracle import OcrSpaceOracle, OpenAIProductOracle, ProductOracle
from .alternatives import AlternativeSuggester, OpenAIAlternativeSuggester
from .openai_client import OpenAIAPIError, OpenAIClient
from .history import HistoryStore
from .config import Settings

__all__ = [
    "AlternativeSuggester",
    "AnalysisResult",
    "Band",
    "Classification",
    "ClassificationError",
    "DermaIQError",
    "EmptyIngredientList",
    "HealthierAlternative",
    "HistoryStore",
    "Ingredient",
    "IngredientGroup",
    "InvalidRiskLevel",
    "NotCosmeticProduct",
    "OcrSpaceOracle",
    "OpenAIAPIError",
    "OpenAIAlternativeSuggester",
    "OpenAIClient",
    "OpenAIProductOracle",
    "OpenAIRiskClassifier",
    "PenaltyDetail",
    "ProductAnalyzer",
    "ProductIdentity",
    "ProductNotIdentified",
    "ProductOracle",
    "ProductRejected",
    "RiskClassifier",
    "RiskLevel",
    "RiskReason",
    "ScoredProduct",
    "ScoringEngine",
    "ScoringError",
    "ScoringPolicy",
    "Settings",
    "StaticRiskClassifier",
    "category_label",
    "resolve_category",
    "score",
]
