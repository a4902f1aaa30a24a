# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for boxvault tests.

Fixtures here are available to every test file automatically. Everything
lives under tmp_path, so tests never touch a real catalog.
"""

import textwrap
from pathlib import Path

import pytest

from boxvault.config.schema import PublishConfig
from boxvault.publish.artifact import VAGRANT_BUILDER_ID, Artifact

BOX_CONTENT = b"vagrant box payload \x00\x01\x02" * 1000


@pytest.fixture()
def box_file(tmp_path: Path) -> Path:
    """A packaged box as the vagrant post-processor would leave it."""
    box = tmp_path / "build" / "mybox.box"
    box.parent.mkdir(parents=True)
    box.write_bytes(BOX_CONTENT)
    return box


@pytest.fixture()
def catalog_root(tmp_path: Path) -> Path:
    return tmp_path / "catalog"


@pytest.fixture()
def publish_config(catalog_root: Path) -> PublishConfig:
    return PublishConfig(
        path=str(catalog_root),
        manifest="mybox.json",
        box_name="mybox",
        box_dir="mybox",
        version="1.0.0",
    )


@pytest.fixture()
def vagrant_artifact(box_file: Path) -> Artifact:
    return Artifact(builder_id=VAGRANT_BUILDER_ID, id="virtualbox", files=(str(box_file),))


@pytest.fixture()
def tmp_config_file(tmp_path: Path, catalog_root: Path) -> Path:
    """A complete, valid boxvault config file."""
    config_content = textwrap.dedent(f"""\
        global:
          log_level: "DEBUG"
        publish:
          path: "{catalog_root}"
          manifest: "mybox.json"
          box_name: "mybox"
          box_dir: "mybox"
          version: "1.0.0"
    """)
    config_file = tmp_path / "publish.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def incomplete_config_file(tmp_path: Path) -> Path:
    """Valid YAML, but `box_name` and `version` are missing."""
    config_content = textwrap.dedent("""\
        publish:
          path: "/srv/boxes"
          manifest: "mybox.json"
          box_dir: "mybox"
    """)
    config_file = tmp_path / "incomplete.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
