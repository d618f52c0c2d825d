# src/wowhead/config.py

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .schemas import Locale, QueryType, parse_query_type

logger = logging.getLogger(__name__)

PROJECT_ROOT  = Path(__file__).parent.parent.parent
SETTINGS_PATH = PROJECT_ROOT / "settings.json"
SETTINGS_ENV  = "WOWHEAD_SETTINGS"


class Settings(BaseModel):
    query_type: QueryType = Field(
        QueryType.Insert,
        description="update, insert, insert-ignore or replace"
    )
    allow_empty_values: bool = Field(
        False,
        description="Write '' for empty fields in UPDATE mode instead of leaving them out."
    )
    append_delete_query: bool = Field(
        False,
        description="Prefix INSERT/REPLACE batches with a DELETE keyed on the first row."
    )
    locale: Locale = Field(Locale.English, description="Page language; English targets base tables.")
    threads: int = Field(4, gt=0, description="Concurrent page downloads.")
    timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds.")

    @field_validator("query_type", mode="before")
    @classmethod
    def _resolve_query_type(cls, value):
        return parse_query_type(value)

    @field_validator("locale", mode="before")
    @classmethod
    def _resolve_locale(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Read settings from `path`, $WOWHEAD_SETTINGS or <project>/settings.json.

    A missing default file means defaults. A bad query_type raises
    InvalidSemantics; anything else wrong raises ConfigError.
    """
    explicit = path is not None or bool(os.environ.get(SETTINGS_ENV))
    path = Path(path or os.environ.get(SETTINGS_ENV) or SETTINGS_PATH)

    if not path.exists():
        if explicit:
            raise ConfigError(f"Settings file not found: {path}")
        logger.info(f"No settings file at {path}, using defaults")
        return Settings()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read settings {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings {path} must hold a JSON object")

    try:
        settings = Settings(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings {path}: {e}") from e

    logger.info(f"Loaded settings from {path}: {settings.query_type.value}, locale {settings.locale.value}")
    return settings
