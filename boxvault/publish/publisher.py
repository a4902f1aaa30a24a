# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Box publisher: copies a packaged Vagrant box into the catalog and records it
in the manifest.

One publish run, in order:
  1. accept only artifacts from the Vagrant post-processor holding a .box
  2. map the builder to a Vagrant provider name
  3. load the current manifest (or start a fresh one)
  4. stream the box to <path>/<box_dir>/<version>/<file>, hashing the very
     bytes being written
  5. merge the provider entry into the manifest
  6. write the manifest back

Any failure aborts the run. The box copy is atomic and happens before the
manifest write, so a manifest never points at a missing or truncated box.
Re-running the same publish is always safe: the box is overwritten and the
manifest entry is replaced rather than duplicated.
"""

import logging
import os
from pathlib import Path

from boxvault.config.schema import PublishConfig
from boxvault.logging.logger import get_logger
from boxvault.publish.artifact import VAGRANT_BUILDER_ID, Artifact, manifest_artifact
from boxvault.publish.destination import Destination, FilesystemDestination
from boxvault.publish.errors import UnsupportedSourceError
from boxvault.publish.manifest import ManifestStore, Provider
from boxvault.utils.hashing import HASH_ALGORITHM

_logger: logging.Logger = get_logger(__name__)

BOX_SUFFIX = ".box"

# Builder names whose Vagrant provider is called something else. Anything not
# listed is passed through unchanged.
_PROVIDER_BY_BUILDER: dict[str, str] = {
    "aws": "aws",
    "digitalocean": "digitalocean",
    "virtualbox": "virtualbox",
    "vmware": "vmware_desktop",
    "parallels": "parallels",
}


def provider_from_builder_name(name: str) -> str:
    """Convert a builder name to the corresponding Vagrant provider."""
    return _PROVIDER_BY_BUILDER.get(name, name)


def box_destination(config: PublishConfig, box_file: str) -> str:
    """Where a box lands: <path>/<box_dir>/<version>/<box file name>."""
    return str(Path(config.path) / config.box_dir / config.version / os.path.basename(box_file))


def manifest_location(config: PublishConfig) -> str:
    """The manifest lives under the destination root. An absolute `manifest` wins."""
    return str(Path(config.path) / config.manifest)


def _select_box(artifact: Artifact) -> str:
    if artifact.builder_id != VAGRANT_BUILDER_ID:
        raise UnsupportedSourceError(
            f"Unknown artifact type, requires box from vagrant post-processor: {artifact.builder_id}"
        )
    if not artifact.files or not artifact.files[0].endswith(BOX_SUFFIX):
        raise UnsupportedSourceError(
            f"Unknown files in artifact from vagrant post-processor: {list(artifact.files)}"
        )
    if len(artifact.files) > 1:
        # Only the first file is published.
        _logger.warning(
            "Artifact lists more than one file, ignoring the rest",
            extra={"published": artifact.files[0], "ignored": list(artifact.files[1:])},
        )
    return artifact.files[0]


class Publisher:
    """Publishes boxes for one PublishConfig into one Destination."""

    def __init__(self, config: PublishConfig, destination: Destination | None = None) -> None:
        self.config = config
        self.destination = destination if destination is not None else FilesystemDestination()
        self.store = ManifestStore(self.destination, config.box_name)

    def publish(self, artifact: Artifact) -> Artifact:
        """
        Publish the box held by `artifact` and return the manifest artifact.

        Raises:
            UnsupportedSourceError: Wrong origin, or no .box file. Nothing is
                written in that case.
            ManifestParseError: The existing manifest is malformed.
            ManifestValidationError: The computed provider entry was rejected.
            OSError: Reading the box or writing to the destination failed.
        """
        box = _select_box(artifact)
        provider_name = provider_from_builder_name(artifact.id)
        config = self.config

        _logger.info(
            "Preparing to copy box",
            extra={"provider": provider_name, "path": config.path, "version": config.version},
        )

        location = manifest_location(config)
        _logger.info("Fetching latest manifest", extra={"location": location})
        manifest = self.store.load(location)

        box_path = box_destination(config, box)
        with open(box, "rb") as source:
            size = os.fstat(source.fileno()).st_size
            _logger.info("Copying box", extra={"box": box, "size": size, "destination": box_path})
            stored = self.destination.put_stream(box_path, source)
        _logger.info("Checksum computed", extra={"checksum": stored.checksum, "size": stored.size})

        manifest = self.store.add(
            manifest,
            config.version,
            Provider(
                name=provider_name,
                url=box_path,
                checksum_type=HASH_ALGORITHM,
                checksum=stored.checksum,
            ),
        )
        self.store.save(manifest, location)

        _logger.info(
            "Box published",
            extra={
                "box_name": manifest.name,
                "version": config.version,
                "provider": provider_name,
                "manifest": location,
            },
        )
        return manifest_artifact(location)
