from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.results import DEFAULT_DATE_FORMAT
from ..models.tables import SheetNames

"""Config loader.

Responsibilities:
- Load YAML config (default location config/salesbook.yml)
- Validate against the bundled JSON schema (unknown keys are rejected)
- Apply defaults for everything that is not set
- Let the SALESBOOK_WORKBOOK environment variable override the workbook path
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/salesbook.yml")
WORKBOOK_ENV = "SALESBOOK_WORKBOOK"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    workbook: str | None = None
    sheets: SheetNames = field(default_factory=SheetNames)
    date_format: str = DEFAULT_DATE_FORMAT
    log_dir: str = "./logs"
    min_year: int = 1900


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = AppConfig()
    sheets_raw = data.get("sheets") or {}
    sheets = SheetNames(
        products=sheets_raw.get("products", defaults.sheets.products),
        customers=sheets_raw.get("customers", defaults.sheets.customers),
        orders=sheets_raw.get("orders", defaults.sheets.orders),
    )
    return AppConfig(
        workbook=data.get("workbook"),
        sheets=sheets,
        date_format=data.get("date_format", defaults.date_format),
        log_dir=data.get("log_dir", defaults.log_dir),
        min_year=data.get("min_year", defaults.min_year),
    )


def resolve_config(path: Path | None = None) -> AppConfig:
    """Load ``path`` (required) or the default config file (optional), then apply env overrides.

    An explicitly given path must exist; a missing default file means built-in defaults.
    """
    if path is not None:
        cfg = load_config(path)
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        cfg = AppConfig()

    env_workbook = os.getenv(WORKBOOK_ENV)
    if env_workbook:
        cfg = replace(cfg, workbook=env_workbook)
    return cfg
