"""
Application Configuration
Loads settings from the environment (or a .env file) with Pydantic Settings.
"""

import logging
import sys
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Recipe Share API"
    LOG_LEVEL: str = "INFO"

    # JSON files the store is seeded from at startup; missing files seed nothing
    SEED_RECIPES_FILE: str = "data/recipes.json"
    SEED_CATEGORIES_FILE: str = "data/categories.json"

    # "tag" or "region": what a category is matched against
    DEFAULT_FILTER_MODE: Literal["tag", "region"] = "tag"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        stream=sys.stdout,
        level=(level or settings.LOG_LEVEL).upper(),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
