# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Artifact references passed between build steps.

An artifact is what one step of a box build hands to the next: who produced
it (`builder_id`), which builder it was built with (`id`), and the files it
consists of. The publisher consumes the Vagrant post-processor's artifact and
hands back one whose only file is the manifest.

On disk an artifact is a small JSON descriptor:

    {"builder_id": "mitchellh.post-processor.vagrant",
     "id": "virtualbox",
     "files": ["output/mybox.box"]}
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

from boxvault.utils.filesystem import atomic_write

# Origin tag of the upstream Vagrant post-processor, the only accepted input.
VAGRANT_BUILDER_ID = "mitchellh.post-processor.vagrant"

# Origin tag of artifacts produced by this publisher.
BUILDER_ID = "boxvault.post-processor.path"


@dataclass(frozen=True)
class Artifact:
    """Reference to the output of one build step."""

    builder_id: str
    id: str
    files: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{self.builder_id}[{self.id}]: {', '.join(self.files) or '<no files>'}"


def manifest_artifact(manifest_location: str) -> Artifact:
    """The artifact returned after a publish: the manifest is now the output."""
    return Artifact(builder_id=BUILDER_ID, id="path", files=(manifest_location,))


def read_artifact(path: Path) -> Artifact:
    """
    Read an artifact descriptor from a JSON file.

    Raises:
        FileNotFoundError: If the descriptor doesn't exist.
        ValueError: If it isn't a JSON object with the expected fields.
    """
    content = path.read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as err:
        raise ValueError(f"Artifact descriptor {path} is not valid JSON: {err}") from err

    if not isinstance(data, dict):
        raise ValueError(f"Artifact descriptor {path} must be a JSON object")

    missing = {"builder_id", "id", "files"} - set(data.keys())
    if missing:
        raise ValueError(
            f"Artifact descriptor {path} is missing fields: {', '.join(sorted(missing))}"
        )

    files = data["files"]
    if not isinstance(files, list) or not all(isinstance(item, str) for item in files):
        raise ValueError(f"Artifact descriptor {path}: 'files' must be a list of strings")

    return Artifact(builder_id=str(data["builder_id"]), id=str(data["id"]), files=tuple(files))


def write_artifact(artifact: Artifact, path: Path) -> None:
    """Write an artifact descriptor atomically, in the format read_artifact expects."""
    data = asdict(artifact)
    data["files"] = list(artifact.files)
    atomic_write(path, json.dumps(data, indent=2, sort_keys=True) + "\n")
