# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for manifest verification against the published boxes.
"""

from pathlib import Path

import pytest

from boxvault.config.schema import PublishConfig
from boxvault.publish.artifact import Artifact
from boxvault.publish.destination import FilesystemDestination
from boxvault.publish.errors import ManifestParseError
from boxvault.publish.publisher import Publisher, box_destination, manifest_location
from boxvault.publish.verifier import verify_manifest


@pytest.fixture()
def published(publish_config: PublishConfig, vagrant_artifact: Artifact) -> PublishConfig:
    Publisher(publish_config).publish(vagrant_artifact)
    return publish_config


def test_freshly_published_manifest_verifies(published: PublishConfig) -> None:
    report = verify_manifest(manifest_location(published), FilesystemDestination())

    assert report.is_valid
    assert report.checked_count == 1
    assert report.mismatches == []
    assert report.missing_files == []


def test_tampered_box_is_reported(published: PublishConfig, box_file: Path) -> None:
    Path(box_destination(published, str(box_file))).write_bytes(b"tampered")

    report = verify_manifest(manifest_location(published), FilesystemDestination())

    assert not report.is_valid
    assert report.mismatches == ["1.0.0/virtualbox"]


def test_missing_box_is_reported(published: PublishConfig, box_file: Path) -> None:
    Path(box_destination(published, str(box_file))).unlink()

    report = verify_manifest(manifest_location(published), FilesystemDestination())

    assert not report.is_valid
    assert report.checked_count == 0
    assert report.missing_files == ["1.0.0/virtualbox"]


def test_absent_manifest_raises(publish_config: PublishConfig) -> None:
    with pytest.raises(FileNotFoundError):
        verify_manifest(manifest_location(publish_config), FilesystemDestination())


def test_corrupt_manifest_raises(publish_config: PublishConfig) -> None:
    location = Path(manifest_location(publish_config))
    location.parent.mkdir(parents=True)
    location.write_text("[]", encoding="utf-8")

    with pytest.raises(ManifestParseError):
        verify_manifest(str(location), FilesystemDestination())
