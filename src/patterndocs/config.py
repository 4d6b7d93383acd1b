"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (PATTERNDOCS__CACHE__TTL_MINUTES=10)
  2. patterndocs.yaml       (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("patterndocs")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "cache.db")
_DEFAULT_CONTENT_ROOT = str(Path(_DEFAULT_DATA_DIR) / "content")
_DEFAULT_CATALOG_PATH = str(Path(_DEFAULT_DATA_DIR) / "entries.json")


def _find_config_file() -> str | None:
    """Return the path of the first patterndocs.yaml found, or None."""
    candidates = [
        Path("patterndocs.yaml"),
        Path(platformdirs.user_config_dir("patterndocs")) / "patterndocs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ContentSettings(BaseModel):
    root: str = _DEFAULT_CONTENT_ROOT
    catalog_path: str = _DEFAULT_CATALOG_PATH
    primary_locale: str = "zh"
    locales: list[str] = ["zh", "en"]
    pending_messages: dict[str, str] = {
        "zh": "内容正在编写中...",
        "en": "Content is being written...",
    }
    untitled_names: dict[str, str] = {
        "zh": "未命名",
        "en": "Untitled",
    }

    @model_validator(mode="after")
    def check_primary_locale(self) -> ContentSettings:
        if self.primary_locale not in self.locales:
            raise ValueError(
                f"primary_locale {self.primary_locale!r} must be one of {self.locales!r}"
            )
        return self

    def pending_message(self, locale: str) -> str:
        """Localised "content pending" text, falling back to the primary locale."""
        return self.pending_messages.get(
            locale, self.pending_messages.get(self.primary_locale, "")
        )

    def untitled_name(self, locale: str) -> str:
        return self.untitled_names.get(locale, self.untitled_names.get(self.primary_locale, ""))


class CacheSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH
    ttl_minutes: int = 30
    key_registry_ttl_hours: int = 24
    cleanup_interval_hours: int = 6


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PATTERNDOCS__CACHE__TTL_MINUTES=10
        env_prefix="PATTERNDOCS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    content: ContentSettings = ContentSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
