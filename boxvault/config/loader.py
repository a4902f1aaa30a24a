# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen
BoxVaultConfig.

The loading pipeline is linear:
  1. Read raw text from the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation (`configure`)
  4. Return the frozen, immutable config object

A broken config stops the run before anything touches the destination.
Validation problems are all reported together, so a config missing both
`version` and `box_name` produces one error naming both.
"""

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from boxvault.config.exceptions import ConfigLoadError, ConfigurationError
from boxvault.config.schema import PUBLISH_OPTIONS, BoxVaultConfig

_MISSING_ERROR_TYPES = frozenset({"missing", "string_too_short"})


def _is_missing(detail: Mapping[str, Any]) -> bool:
    """True for errors meaning "publish option absent, empty or null"."""
    loc = detail["loc"]
    if not loc or loc[0] != "publish":
        return False
    if detail["type"] in _MISSING_ERROR_TYPES:
        return True
    # `version:` (or `publish:`) with nothing after it parses as None.
    return detail["type"] in {"string_type", "model_type"} and detail.get("input") is None


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a
            YAML mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def _missing_publish_options(err: ValidationError) -> list[str]:
    """Pick the absent or empty publish options out of a pydantic error."""
    missing: set[str] = set()
    for detail in err.errors():
        loc = detail["loc"]
        if not _is_missing(detail):
            continue
        if len(loc) == 1:
            # The whole section is absent.
            missing.update(PUBLISH_OPTIONS)
        elif loc[1] in PUBLISH_OPTIONS:
            missing.add(str(loc[1]))
    return [name for name in PUBLISH_OPTIONS if name in missing]


def _format_errors(err: ValidationError, missing: list[str]) -> list[str]:
    lines = [f"publish option '{name}' must be set" for name in missing]
    for detail in err.errors():
        if _is_missing(detail):
            continue
        where = ".".join(str(part) for part in detail["loc"]) or "<root>"
        message = detail["msg"]
        if detail["type"] == "string_type" and isinstance(detail.get("input"), (int, float)):
            # YAML reads `version: 1.10` as the float 1.1, so it is not coerced.
            message += f"; quote it in YAML, e.g. {detail['loc'][-1]}: \"{detail['input']}\""
        lines.append(f"{where}: {message}")
    return lines


def configure(raw_data: Mapping[str, Any], source: str = "<config>") -> BoxVaultConfig:
    """
    Validate an in-memory config mapping into a frozen BoxVaultConfig.

    Args:
        raw_data: Parsed config, shaped like the YAML file.
        source: Where the data came from, for error messages.

    Returns:
        A fully validated, frozen BoxVaultConfig instance.

    Raises:
        ConfigurationError: Listing every missing option and every other
            schema violation.
    """
    try:
        return BoxVaultConfig.model_validate(dict(raw_data))
    except ValidationError as err:
        missing = _missing_publish_options(err)
        problems = _format_errors(err, missing)
        raise ConfigurationError(
            f"Config validation failed for {source}:\n  " + "\n  ".join(problems),
            missing=missing,
        ) from err


def load_config(config_path: Path) -> BoxVaultConfig:
    """
    Load, validate, and freeze a config file into a BoxVaultConfig object.

    Args:
        config_path: Path to a YAML config file.

    Returns:
        A fully validated, frozen BoxVaultConfig instance.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigurationError: Schema violations (missing options, wrong types,
            unknown keys).
    """
    raw_data = _read_yaml_file(config_path)
    return configure(raw_data, source=str(config_path))
