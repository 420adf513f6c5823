"""
Product oracles: turn a product photo into a ProductIdentity (name, type, INCI list).

- OpenAIProductOracle asks a vision model to identify the product.
- OcrSpaceOracle reads the label text with OCR.space and extracts the INCI list.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import Dict, List, Optional, Tuple

import requests

from .errors import NotCosmeticProduct, ProductNotIdentified
from .models import ProductIdentity
from .openai_client import OpenAIClient
from .prompts import VISION_SYSTEM, VISION_USER

INGREDIENTS_HEADING = re.compile(
    r"\b(?:ingredients?|ingr[eé]dients?|ingredientes|inci)\b\s*[:\-]?", re.IGNORECASE
)


class ProductOracle:
    """
    Base interface for anything that maps a product image to its identity.
    """

    def identify(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> ProductIdentity:
        raise NotImplementedError

    @staticmethod
    def check(identity: ProductIdentity) -> ProductIdentity:
        """Reject products that cannot be scored."""
        if not identity.is_cosmetic or identity.product_type == "not_cosmetic":
            raise NotCosmeticProduct(
                "This is not a dermatological or cosmetic product",
                details=(
                    f'The detected product "{identity.name}" appears to be a non-cosmetic item. '
                    "Please upload an image of a skincare, haircare, or beauty product."
                ),
            )
        if not identity.ingredients:
            raise ProductNotIdentified(
                "Could not identify ingredients for this product",
                details="Please ensure the product label is clearly visible, or try a different angle.",
            )
        return identity


class OpenAIProductOracle(ProductOracle):
    def __init__(self, client: OpenAIClient):
        self.client = client
        self.log = logging.getLogger(self.__class__.__name__)

    def identify(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> ProductIdentity:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        content = [
            {"type": "text", "text": VISION_USER},
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
        ]
        data = self.client.json_call(VISION_SYSTEM, content, max_tokens=1500)
        identity = self._parse(data)
        self.log.info(
            "Identified %r (%s, %d ingredients, confidence=%s)",
            identity.name,
            identity.product_type,
            len(identity.ingredients),
            identity.confidence,
        )
        return self.check(identity)

    @staticmethod
    def _parse(data: object) -> ProductIdentity:
        if not isinstance(data, dict) or not isinstance(data.get("product_name"), str):
            raise ProductNotIdentified(
                "Could not identify the product from the image",
                details="Please make sure the product is clearly visible in the image.",
            )
        raw_ingredients = data.get("ingredients") or []
        if not isinstance(raw_ingredients, list):
            raise ProductNotIdentified(
                "Could not identify the product from the image",
                details="The ingredient list was not returned as a list.",
            )
        ingredients = [str(item).strip() for item in raw_ingredients if str(item).strip()]
        return ProductIdentity(
            name=data["product_name"].strip() or "Unknown product",
            product_type=str(data.get("product_type") or "unknown"),
            ingredients=ingredients,
            confidence=str(data.get("confidence") or "low"),
            is_cosmetic=bool(data.get("is_cosmetic", True)),
            source="openai:vision",
            raw_payload=data,
        )


class OcrSpaceOracle(ProductOracle):
    """
    Extract the ingredient list printed on a label. OCR cannot tell cosmetics from
    other products, so everything is treated as cosmetic.
    """

    OCR_SPACE_ENDPOINT = "https://api.ocr.space/parse/image"

    def __init__(
        self,
        api_key: str,
        lang: str = "eng",
        endpoint: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.lang = lang
        self.endpoint = endpoint or self.OCR_SPACE_ENDPOINT
        self.session = session or requests.Session()
        self.timeout = timeout
        self.log = logging.getLogger(self.__class__.__name__)

    def identify(
        self, image_bytes: bytes, mime_type: str = "image/jpeg", name: Optional[str] = None
    ) -> ProductIdentity:
        text, ocr_error, payload = self._call_ocr_space(image_bytes, mime_type)
        if ocr_error:
            raise ProductNotIdentified("Could not read the product label", details=ocr_error)
        identity = ProductIdentity(
            name=name or self._guess_name(text),
            product_type="unknown",
            ingredients=self.extract_ingredients(text),
            confidence="medium" if text else "low",
            is_cosmetic=True,
            source="ocr_space",
            raw_payload={"ocr_text": text, "ocr_space_payload": payload},
        )
        return self.check(identity)

    @staticmethod
    def extract_ingredients(text: str) -> List[str]:
        """
        Take the comma-separated list following the "Ingredients" heading.
        Without a heading the whole text is treated as the list.
        """
        if not text:
            return []
        match = INGREDIENTS_HEADING.search(text)
        body = text[match.end():] if match else text
        body = " ".join(body.split())
        ingredients = []
        for token in re.split(r"[,;]", body):
            name = token.strip().rstrip(".").strip()
            if name and name.lower() not in {n.lower() for n in ingredients}:
                ingredients.append(name)
        return ingredients

    @staticmethod
    def _guess_name(text: str) -> str:
        for line in (text or "").splitlines():
            line = line.strip()
            if line and not INGREDIENTS_HEADING.match(line):
                return line
        return "Label scan"

    def _call_ocr_space(
        self, image_bytes: bytes, mime_type: str
    ) -> Tuple[str, Optional[str], Optional[Dict]]:
        extension = mime_type.split("/")[-1] or "png"
        files = {"filename": (f"image.{extension}", image_bytes)}
        data = {"apikey": self.api_key, "language": self.lang, "OCREngine": "2"}

        try:
            response = self.session.post(
                self.endpoint, files=files, data=data, timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            self.log.warning("OCR.space request failed: %s", exc)
            return "", str(exc), None

        if payload.get("IsErroredOnProcessing"):
            errors = payload.get("ErrorMessage") or []
            if isinstance(errors, str):
                errors = [errors]
            error_text = "; ".join(errors) if errors else payload.get("ErrorDetails") or "OCR.space failed"
            return "", error_text, payload

        parsed_results = payload.get("ParsedResults") or []
        text_parts = [result.get("ParsedText", "") for result in parsed_results]
        text = "\n".join(part for part in text_parts if part).strip()
        return text, None, payload
