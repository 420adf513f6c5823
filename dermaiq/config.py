import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str]
    openai_base_url: str
    openai_model: str
    ocr_space_api_key: Optional[str]
    history_path: str
    max_image_bytes: int
    log_level: str

    @staticmethod
    def from_env() -> "Settings":
        openai_key = os.environ.get("OPENAI_API_KEY", "").strip()
        base_url = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        model = os.environ.get("OPENAI_MODEL", "gpt-4o").strip()
        ocr_key = os.environ.get("OCR_SPACE_API_KEY", "").strip()
        history_path = os.environ.get("DERMAIQ_HISTORY_PATH", "db/history/history.csv").strip()
        max_image_bytes = int(os.environ.get("DERMAIQ_MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
        log_level = os.environ.get("DERMAIQ_LOG_LEVEL", "INFO").strip().upper()

        return Settings(
            openai_api_key=openai_key or None,
            openai_base_url=base_url,
            openai_model=model,
            ocr_space_api_key=ocr_key or None,
            history_path=history_path,
            max_image_bytes=max_image_bytes,
            log_level=log_level,
        )

    def require_openai(self) -> str:
        if not self.openai_api_key:
            raise RuntimeError("Missing OPENAI_API_KEY")
        return self.openai_api_key
