"""
FastAPI wrapper for the DermaIQ scoring engine.

Endpoints:
- GET /health          : readiness probe
- POST /score          : score an already classified ingredient list
- POST /analyze        : identify, classify and score a product photo
- GET /history         : past analyses (optionally per user)
- GET /recommendations : healthier alternatives suggested for past products

Run locally:
    uvicorn api_server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from dermaiq import (
    ClassificationError,
    HistoryStore,
    OpenAIAlternativeSuggester,
    OpenAIAPIError,
    OpenAIClient,
    OpenAIProductOracle,
    OpenAIRiskClassifier,
    ProductAnalyzer,
    ProductRejected,
    ScoringEngine,
    ScoringError,
    Settings,
)

log = logging.getLogger("api_server")


class IngredientIn(BaseModel):
    name: str = Field(..., description="INCI or common ingredient name")
    risk_level: str = Field(..., description="green, yellow, orange or red")
    risk_reasons: List[str] = Field(
        default_factory=list,
        description="Zero or more of carcinogen, endocrine, allergen, irritant, pollutant",
    )
    category: Optional[str] = Field(None, description="Display category (not used for scoring)")
    note: Optional[str] = Field(None, description="Benefit or concern text for display")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return v.strip()


class ScoreRequest(BaseModel):
    ingredients: List[IngredientIn] = Field(..., description="Classified ingredients to score")


def build_analyzer(settings: Settings, engine: ScoringEngine) -> Optional[ProductAnalyzer]:
    """Wire the model-backed collaborators, or None when no API key is configured."""
    if not settings.openai_api_key:
        log.warning("OPENAI_API_KEY not set; /analyze is disabled")
        return None
    client = OpenAIClient.from_settings(settings)
    return ProductAnalyzer(
        oracle=OpenAIProductOracle(client),
        classifier=OpenAIRiskClassifier(client),
        engine=engine,
        suggester=OpenAIAlternativeSuggester(client),
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[ScoringEngine] = None,
    analyzer: Optional[ProductAnalyzer] = None,
    history: Optional[HistoryStore] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = engine or ScoringEngine()
    if analyzer is None:
        analyzer = build_analyzer(settings, engine)
    history = history or HistoryStore(settings.history_path)

    app = FastAPI(
        title="DermaIQ Scoring API",
        description="Deterministic EU penalty-based scoring of cosmetic ingredient classifications.",
        version="1.0.0",
    )
    # CORS for broad consumption; tighten in production by setting allowed origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "analysis_enabled": analyzer is not None}

    @app.post("/score")
    def score(request: ScoreRequest) -> Dict[str, Any]:
        try:
            scored = engine.score([item.model_dump() for item in request.ingredients])
        except (ScoringError, ClassificationError) as exc:
            raise HTTPException(
                status_code=422,
                detail={"error": "Could not score this product", "details": str(exc)},
            )
        return scored.to_dict()

    @app.post("/analyze")
    def analyze(
        image: UploadFile = File(...),
        user_id: Optional[str] = Form(None),
    ) -> Dict[str, Any]:
        if analyzer is None:
            raise HTTPException(status_code=503, detail={"error": "Product analysis is not configured"})
        if not (image.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail={"error": "File must be an image (JPEG or PNG)"})
        image_bytes = image.file.read()
        if not image_bytes:
            raise HTTPException(status_code=400, detail={"error": "No image provided"})
        if len(image_bytes) > settings.max_image_bytes:
            limit_mb = settings.max_image_bytes / (1024 * 1024)
            raise HTTPException(
                status_code=400, detail={"error": f"Image size must be less than {limit_mb:g}MB"}
            )

        try:
            result = analyzer.analyze(image_bytes, image.content_type)
        except ProductRejected as exc:
            raise HTTPException(status_code=422, detail={"error": exc.message, "details": exc.details})
        except ScoringError as exc:
            raise HTTPException(
                status_code=422,
                detail={"error": "Could not score this product", "details": str(exc)},
            )
        except (ClassificationError, OpenAIAPIError) as exc:
            log.error("Analysis failed: %s", exc)
            raise HTTPException(
                status_code=502,
                detail={"error": "Could not generate product analysis", "details": str(exc)},
            )

        response = result.to_dict()
        # Stored before responding; a failed write is reported, not hidden.
        try:
            response["history_id"] = history.append(result, user_id=user_id, command="api")
        except OSError as exc:
            log.error("Failed to save analysis for %r: %s", result.product.name, exc)
            response["history_id"] = None
        return response

    @app.get("/history")
    def get_history(user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return history.rows(user_id=user_id)

    @app.get("/recommendations")
    def get_recommendations(user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return history.recommendations(user_id=user_id)

    return app


app = create_app()


if __name__ == "__main__":
    _settings = Settings.from_env()
    logging.basicConfig(level=_settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    uvicorn.run("api_server:app", host="0.0.0.0", port=8000, reload=False)
