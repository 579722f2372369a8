# File: layout_editor/core/config.py
import os
from dotenv import load_dotenv

from layout_editor.services.layout_models import LayoutConfig

load_dotenv()


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "PDF Layout Editor API")
    PROJECT_VERSION: str = "0.1.0"

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Upload limits
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "10"))

    # Content proposer (Gemini)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TIMEOUT: float = _float_env("GEMINI_TIMEOUT", 120.0)

    # Layout thresholds
    LAYOUT_PADDING: float = _float_env("LAYOUT_PADDING", 4.0)
    LAYOUT_LINE_HEIGHT: float = _float_env("LAYOUT_LINE_HEIGHT", 1.3)
    LAYOUT_CONSTRAINT_LINE_HEIGHT: float = _float_env("LAYOUT_CONSTRAINT_LINE_HEIGHT", 1.2)
    LAYOUT_SAME_LINE_EPSILON: float = _float_env("LAYOUT_SAME_LINE_EPSILON", 5.0)
    LAYOUT_MERGE_GAP: float = _float_env("LAYOUT_MERGE_GAP", 10.0)
    LAYOUT_OVERLAP_GAP: float = _float_env("LAYOUT_OVERLAP_GAP", 10.0)
    LAYOUT_MIN_OVERLAP_WIDTH: float = _float_env("LAYOUT_MIN_OVERLAP_WIDTH", 50.0)
    LAYOUT_ELLIPSIS: str = os.getenv("LAYOUT_ELLIPSIS", "...")

    # CORS settings
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

    def layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            padding=self.LAYOUT_PADDING,
            line_height_factor=self.LAYOUT_LINE_HEIGHT,
            constraint_line_height=self.LAYOUT_CONSTRAINT_LINE_HEIGHT,
            same_line_epsilon=self.LAYOUT_SAME_LINE_EPSILON,
            merge_gap=self.LAYOUT_MERGE_GAP,
            overlap_gap=self.LAYOUT_OVERLAP_GAP,
            min_overlap_width=self.LAYOUT_MIN_OVERLAP_WIDTH,
            ellipsis=self.LAYOUT_ELLIPSIS,
        )


settings = Settings()
