import base64

import pytest

from dermaiq import NotCosmeticProduct, OcrSpaceOracle, OpenAIProductOracle, ProductNotIdentified


class FakeClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def json_call(self, system, user, max_tokens=1500):
        self.calls.append((system, user))
        return self.payload


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        return None

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return self.response


def test_openai_oracle_identifies_cosmetic():
    client = FakeClient(
        {
            "product_name": "Hydra Cream",
            "product_type": "skincare",
            "ingredients": ["Aqua", " Glycerin ", ""],
            "confidence": "high",
            "is_cosmetic": True,
        }
    )
    identity = OpenAIProductOracle(client).identify(b"\x89PNG", "image/png")

    assert identity.name == "Hydra Cream"
    assert identity.ingredients == ["Aqua", "Glycerin"]
    assert identity.source == "openai:vision"
    _, content = client.calls[0]
    expected = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode("ascii")
    assert content[1]["image_url"]["url"] == expected


def test_openai_oracle_rejects_non_cosmetic():
    client = FakeClient(
        {"product_name": "Cola", "product_type": "not_cosmetic", "ingredients": ["Sugar"], "is_cosmetic": False}
    )
    with pytest.raises(NotCosmeticProduct) as exc_info:
        OpenAIProductOracle(client).identify(b"img")
    assert "Cola" in exc_info.value.details


@pytest.mark.parametrize(
    "payload",
    [
        "I cannot see a product",
        {"product_type": "skincare"},
        {"product_name": "Cream", "ingredients": "Aqua, Glycerin"},
        {"product_name": "Cream", "product_type": "skincare", "ingredients": [], "is_cosmetic": True},
    ],
)
def test_openai_oracle_unidentified(payload):
    with pytest.raises(ProductNotIdentified):
        OpenAIProductOracle(FakeClient(payload)).identify(b"img")


def test_extract_ingredients_after_heading():
    text = "Gentle Face Wash\n200 ml\nIngredients: Aqua, Sodium Laureth Sulfate,\nGlycerin; Parfum, aqua."
    assert OcrSpaceOracle.extract_ingredients(text) == [
        "Aqua",
        "Sodium Laureth Sulfate",
        "Glycerin",
        "Parfum",
    ]
    assert OcrSpaceOracle.extract_ingredients("") == []
    assert OcrSpaceOracle.extract_ingredients("Aqua, Glycerin") == ["Aqua", "Glycerin"]


def test_ocr_oracle_builds_identity():
    session = FakeSession(
        FakeResponse(
            {
                "IsErroredOnProcessing": False,
                "ParsedResults": [{"ParsedText": "Gentle Face Wash\nINGREDIENTS: Aqua, Glycerin"}],
            }
        )
    )
    oracle = OcrSpaceOracle(api_key="key", session=session)
    identity = oracle.identify(b"img", "image/jpeg")

    assert identity.name == "Gentle Face Wash"
    assert identity.ingredients == ["Aqua", "Glycerin"]
    assert identity.source == "ocr_space"
    url, kwargs = session.requests[0]
    assert url == OcrSpaceOracle.OCR_SPACE_ENDPOINT
    assert kwargs["data"]["apikey"] == "key"
    assert kwargs["files"]["filename"][0] == "image.jpeg"


def test_ocr_oracle_reports_processing_errors():
    session = FakeSession(
        FakeResponse({"IsErroredOnProcessing": True, "ErrorMessage": ["Image too small"]})
    )
    with pytest.raises(ProductNotIdentified) as exc_info:
        OcrSpaceOracle(api_key="key", session=session).identify(b"img")
    assert exc_info.value.details == "Image too small"
