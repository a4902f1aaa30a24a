# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for boxvault.

Every config section gets its own frozen pydantic model. Frozen means once
you create it, you cannot mutate it: the publisher receives its config at
construction and nothing along the way gets to change it.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure (typos in option
    names would otherwise be silently ignored)
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The publish options, in the order they are reported when missing.
PUBLISH_OPTIONS: tuple[str, ...] = ("path", "manifest", "box_name", "box_dir", "version")


class GlobalConfig(BaseModel):
    """Cross-cutting settings. Everything here has a sensible default."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for JSON-lines log output",
    )

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return upper


class PublishConfig(BaseModel):
    """
    Where and under which name/version a box gets published.

    All five options are mandatory and must be non-empty. Together they
    determine both the box destination

        <path>/<box_dir>/<version>/<box file name>

    and the manifest location <path>/<manifest>.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    path: str = Field(min_length=1, description="Destination root for boxes and the manifest")
    manifest: str = Field(min_length=1, description="Manifest path, relative to `path`")
    box_name: str = Field(min_length=1, description="Name recorded in a fresh manifest")
    box_dir: str = Field(min_length=1, description="Subdirectory of `path` holding this box")
    version: str = Field(min_length=1, description="Version the box is published under")


class BoxVaultConfig(BaseModel):
    """Top-level config container, one section per YAML key."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    publish: PublishConfig
