# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Manifest verification: checks that every box a manifest advertises is present
and still matches its recorded checksum.

Reports ALL mismatches and missing boxes, not just the first. Entries are
labelled "<version>/<provider>".
"""

import logging
from dataclasses import dataclass, field

from boxvault.logging.logger import get_logger
from boxvault.publish.destination import Destination
from boxvault.publish.manifest import parse_manifest

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationReport:
    """Outcome of a manifest verification run."""

    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)


def verify_manifest(location: str, destination: Destination) -> VerificationReport:
    """
    Verify every provider entry of the manifest at `location`.

    Raises:
        FileNotFoundError: If there is no manifest at `location`.
        ManifestParseError: If the manifest is malformed.
    """
    if not destination.exists(location):
        raise FileNotFoundError(f"Manifest not found: {location}")

    manifest = parse_manifest(destination.get(location), location)

    mismatches: list[str] = []
    missing_files: list[str] = []
    checked = 0

    for entry in manifest.versions:
        for provider in entry.providers:
            label = f"{entry.version}/{provider.name}"
            if not destination.exists(provider.url):
                missing_files.append(label)
                _logger.error("Box missing", extra={"entry": label, "url": provider.url})
                continue

            actual = destination.checksum(provider.url)
            checked += 1
            if actual != provider.checksum.lower():
                mismatches.append(label)
                _logger.error(
                    "Checksum mismatch",
                    extra={
                        "entry": label,
                        "expected": provider.checksum[:16] + "...",
                        "actual": actual[:16] + "...",
                    },
                )
            else:
                _logger.debug("Checksum verified", extra={"entry": label})

    is_valid = not mismatches and not missing_files
    if is_valid:
        _logger.info("All boxes verified", extra={"checked_count": checked, "manifest": location})
    else:
        _logger.error(
            "Manifest verification failed",
            extra={"mismatches": len(mismatches), "missing": len(missing_files)},
        )

    return VerificationReport(
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
    )
