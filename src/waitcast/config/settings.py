"""
Typed configuration for the client.

The baseline is the packaged `defaults.yaml`. `WAITCAST_CONFIG_PATH` swaps in a
whole YAML file instead, and a handful of `WAITCAST_*` variables patch single
values on top (see `_apply_env_overrides`). Business hours, suggestion
thresholds and the fallback region are all read from here.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from waitcast.core.env import load_dotenv_if_present
from waitcast.core.time import parse_hhmm


def _yaml_mapping(text: str, source: object) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{source}: top-level YAML value must be a mapping")
    return data


def _read_package_yaml(filename: str) -> dict[str, Any]:
    return _yaml_mapping(resources.files("waitcast.config").joinpath(filename).read_text(encoding="utf-8"), filename)


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    return _yaml_mapping(Path(path).read_text(encoding="utf-8"), path)


class AppSettings(BaseModel):
    name: str = "waitcast"
    timezone: str = "Asia/Shanghai"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class BackendSettings(BaseModel):
    base_url: str = "https://sushiro.chinatsu1124.com"


class BusinessHoursSettings(BaseModel):
    """Inclusive window a planned visit time must fall into."""

    open: str = "10:30"
    close: str = "22:00"

    @model_validator(mode="after")
    def _validate_order(self) -> "BusinessHoursSettings":
        if parse_hhmm(self.close) < parse_hhmm(self.open):
            raise ValueError("business_hours.close must not be before business_hours.open")
        return self


class SelectionSettings(BaseModel):
    fallback_region: str | None = "杭州"
    # region name -> store id picked automatically after the region is selected
    default_store_ids: dict[str, int] = Field(default_factory=dict)


class SuggestionSettings(BaseModel):
    minutes_per_queue_position: float = Field(3, gt=0)
    favorable_max_minutes: int = Field(30, ge=0)
    moderate_max_minutes: int = Field(90, ge=0)

    @model_validator(mode="after")
    def _validate_thresholds(self) -> "SuggestionSettings":
        if self.moderate_max_minutes < self.favorable_max_minutes:
            raise ValueError("suggestion.moderate_max_minutes must be >= favorable_max_minutes")
        return self


class StorageSettings(BaseModel):
    state_path: str = ".cache/waitcast/state.json"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    business_hours: BusinessHoursSettings = Field(default_factory=BusinessHoursSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    suggestion: SuggestionSettings = Field(default_factory=SuggestionSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Patch the raw payload from the `WAITCAST_*` whitelist."""
    data = dict(data)

    log_level = os.getenv("WAITCAST_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    backend_url = os.getenv("WAITCAST_BACKEND_URL")
    if backend_url:
        data.setdefault("backend", {})["base_url"] = backend_url

    state_path = os.getenv("WAITCAST_STATE_PATH")
    if state_path:
        data.setdefault("storage", {})["state_path"] = state_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Validated settings, loaded once per process."""
    load_dotenv_if_present()
    config_path = os.getenv("WAITCAST_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """`logging.config.dictConfig` payload from the packaged `logging.yaml`."""
    return _read_package_yaml("logging.yaml")
