"""Inquiry config loading from config.json plus env overrides."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


def _env_path(name: str, fallback: Path) -> Path:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else fallback.expanduser()


_USER_HOME = Path.home()
_XDG_CONFIG_HOME = _env_path("XDG_CONFIG_HOME", _USER_HOME / ".config")
DEFAULT_CONFIG_HOME = _XDG_CONFIG_HOME / "option-inquiry"
DEFAULT_INQUIRY_CONFIG_JSON = _env_path("OPTION_INQUIRY_CONFIG_JSON", DEFAULT_CONFIG_HOME / "config.json")

ENV_PREFIX = "OPTION_INQUIRY_"
SECTIONS = {"sheets", "quote", "logging", "output"}


class SheetsConfig(BaseModel):
    reference: str = "7095"
    vanilla: str = "香草看涨报价"
    snowball: str = "雪球报价"


class QuoteConfig(BaseModel):
    source_label: str = "多家券商"


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    log_file: Path | None = None

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.strip().upper() or "WARNING"


class OutputConfig(BaseModel):
    indent: int | None = None
    ensure_ascii: bool = False


class AppConfig(BaseModel):
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)
    quote: QuoteConfig = Field(default_factory=QuoteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def expanded(self) -> "AppConfig":
        clone = self.model_copy(deep=True)
        if clone.logging.log_file is not None:
            clone.logging.log_file = clone.logging.log_file.expanduser()
        return clone


def _coerce_env_value(value: str) -> Any:
    lower = value.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _read_config_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}

    if isinstance(loaded, dict):
        return loaded
    return {}


def _extract_inquiry_config(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    raw = data.get("inquiry")
    if not isinstance(raw, dict):
        return out
    for section in SECTIONS:
        value = raw.get(section)
        if isinstance(value, dict):
            out[section] = value
    return out


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    result = dict(data)
    for key, raw in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == "OPTION_INQUIRY_CONFIG_JSON":
            continue
        tokens = key[len(ENV_PREFIX) :].lower().split("_")
        section = tokens[0]
        if section not in SECTIONS or len(tokens) == 1:
            continue
        field = "_".join(tokens[1:])
        section_obj = dict(result.get(section, {}))
        # Sheet and label values are free text; keep them verbatim.
        section_obj[field] = raw if section in {"sheets", "quote"} else _coerce_env_value(raw)
        result[section] = section_obj
    return result


def load_config() -> AppConfig:
    raw = _read_config_json(DEFAULT_INQUIRY_CONFIG_JSON)
    from_file = _extract_inquiry_config(raw)
    merged = _apply_env_overrides(from_file)
    return AppConfig.model_validate(merged).expanded()
