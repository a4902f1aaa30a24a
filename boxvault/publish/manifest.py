# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Vagrant box manifest: the versioned catalog of published boxes.

The manifest is the JSON document `vagrant box add <url-to-manifest>` reads:

    {
      "name": "mybox",
      "versions": [
        {
          "version": "1.0.0",
          "providers": [
            {"name": "virtualbox", "url": "/srv/boxes/mybox/1.0.0/mybox.box",
             "checksum_type": "sha256", "checksum": "9f86d0..."}
          ]
        }
      ]
    }

Entries are keyed: one entry per version, one provider per name inside a
version. Publishing the same version+provider again replaces the existing
entry in place instead of appending a duplicate, which is what makes
re-running a failed publish safe.

The document is always rewritten whole, atomically, through a Destination.
There is no locking. Two publishers writing the same manifest at the same
time race and the last writer wins.
"""

import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from boxvault.logging.logger import get_logger
from boxvault.publish.destination import Destination
from boxvault.publish.errors import ManifestParseError, ManifestValidationError
from boxvault.utils.hashing import HASH_ALGORITHM, is_sha256_hex

_logger: logging.Logger = get_logger(__name__)


class Provider(BaseModel):
    """One downloadable box for one provider (virtualbox, vmware_desktop, ...)."""

    # extra="allow" keeps hand-added keys alive across a load/save cycle.
    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    url: str
    checksum_type: str
    checksum: str


class VersionEntry(BaseModel):
    """All providers published under one version string."""

    model_config = ConfigDict(frozen=True, extra="allow")

    version: str
    providers: list[Provider] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_provider_names(self) -> "VersionEntry":
        names = [provider.name for provider in self.providers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(
                f"version {self.version!r} lists provider(s) more than once: {', '.join(duplicates)}"
            )
        return self


class Manifest(BaseModel):
    """The whole catalog for one box name."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    versions: list[VersionEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_versions(self) -> "Manifest":
        keys = [entry.version for entry in self.versions]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"version(s) listed more than once: {', '.join(duplicates)}")
        return self


def _validate_provider(provider: Provider) -> None:
    if provider.checksum_type != HASH_ALGORITHM:
        raise ManifestValidationError(
            f"Provider {provider.name!r}: unsupported checksum type "
            f"{provider.checksum_type!r}, expected {HASH_ALGORITHM!r}"
        )
    if not is_sha256_hex(provider.checksum):
        raise ManifestValidationError(
            f"Provider {provider.name!r}: checksum must be 64 lowercase hex characters, "
            f"got {provider.checksum!r}"
        )


def add_provider(manifest: Manifest, version: str, provider: Provider) -> Manifest:
    """
    Merge `provider` into `manifest` under `version`.

    The version entry is appended if it doesn't exist yet. Inside it, a
    provider with the same name is replaced at its current position, or the
    new one is appended. The input manifest is not modified.

    Raises:
        ManifestValidationError: If the provider's checksum is malformed.
    """
    _validate_provider(provider)

    versions = list(manifest.versions)
    for index, entry in enumerate(versions):
        if entry.version != version:
            continue
        providers = list(entry.providers)
        for position, existing in enumerate(providers):
            if existing.name == provider.name:
                providers[position] = provider
                break
        else:
            providers.append(provider)
        versions[index] = entry.model_copy(update={"providers": providers})
        break
    else:
        versions.append(VersionEntry(version=version, providers=[provider]))

    return manifest.model_copy(update={"versions": versions})


def parse_manifest(data: bytes, location: str) -> Manifest:
    """
    Parse a stored manifest document.

    Raises:
        ManifestParseError: If the bytes aren't UTF-8 JSON matching the schema,
            or list a version or provider twice.
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise ManifestParseError(f"Manifest {location} is not valid JSON: {err}") from err

    try:
        return Manifest.model_validate(raw)
    except ValidationError as err:
        raise ManifestParseError(f"Manifest {location} does not match the schema:\n{err}") from err


def serialize_manifest(manifest: Manifest) -> bytes:
    """Canonical JSON: two-space indent, sorted keys, trailing newline."""
    data = manifest.model_dump(mode="json")
    return (json.dumps(data, indent=2, sort_keys=True) + "\n").encode("utf-8")


class ManifestStore:
    """
    Loads, merges and saves manifests through a Destination.

    `box_name` is only used when no manifest exists yet. An existing manifest
    keeps the name it was created with.
    """

    def __init__(self, destination: Destination, box_name: str) -> None:
        self._destination = destination
        self._box_name = box_name

    def load(self, location: str) -> Manifest:
        """
        Read the manifest at `location`, or start a fresh one if there is none.

        Raises:
            ManifestParseError: If the stored document is malformed.
            OSError: If the location exists but can't be read.
        """
        if not self._destination.exists(location):
            _logger.info(
                "No manifest found, starting a new one",
                extra={"location": location, "box_name": self._box_name},
            )
            return Manifest(name=self._box_name)

        manifest = parse_manifest(self._destination.get(location), location)
        if manifest.name != self._box_name:
            _logger.warning(
                "Existing manifest has a different box name, keeping it",
                extra={"location": location, "manifest_name": manifest.name, "box_name": self._box_name},
            )
        _logger.debug(
            "Manifest loaded",
            extra={"location": location, "version_count": len(manifest.versions)},
        )
        return manifest

    def add(self, manifest: Manifest, version: str, provider: Provider) -> Manifest:
        """Merge-by-key update, see add_provider."""
        updated = add_provider(manifest, version, provider)
        _logger.info(
            "Provider recorded in manifest",
            extra={"version": version, "provider": provider.name, "url": provider.url},
        )
        return updated

    def save(self, manifest: Manifest, location: str) -> None:
        """
        Write the whole manifest to `location` atomically.

        Raises:
            OSError: If the write fails. A previous manifest stays intact.
        """
        self._destination.put(location, serialize_manifest(manifest))
        _logger.info(
            "Manifest written",
            extra={"location": location, "version_count": len(manifest.versions)},
        )
