from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Tuple

import yaml
from pydantic import BaseModel, Field

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_DATA_PATH = DATA_DIR / "sekki_jst.json"
DEFAULT_REFERENCE_TZ = "Asia/Tokyo"


class KigakuConfig(BaseModel):
    """Configuration for the star engine."""

    reference_tz: str = DEFAULT_REFERENCE_TZ
    data_path: Path = DEFAULT_DATA_PATH
    language: Literal["JA", "EN"] = "JA"

    # Reported by supported_year_range() when the table could not be loaded
    fallback_year_range: Tuple[int, int] = Field(default=(1900, 2100))

    @classmethod
    def from_env(cls) -> "KigakuConfig":
        raw = {}
        if os.getenv("KIGAKU_REFERENCE_TZ"):
            raw["reference_tz"] = os.getenv("KIGAKU_REFERENCE_TZ")
        if os.getenv("SEKKI_DATA_PATH"):
            raw["data_path"] = os.getenv("SEKKI_DATA_PATH")
        lang = os.getenv("KIGAKU_DEFAULT_LANG", "").strip().upper()
        if lang in {"JA", "EN"}:
            raw["language"] = lang
        return cls.model_validate(raw)


def load_config_from_yaml(path: Path) -> KigakuConfig:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return KigakuConfig.model_validate(raw)
