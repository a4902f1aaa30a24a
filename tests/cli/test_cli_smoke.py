# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI smoke tests.

We use subprocess to run the actual CLI entrypoint the way a CI job would.
This catches issues that unit tests miss, like broken imports or entrypoint
registration, and pins down the exit codes.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from boxvault.publish.artifact import BUILDER_ID, VAGRANT_BUILDER_ID

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    """Run `boxvault` with the given arguments and capture output."""
    return subprocess.run(
        [sys.executable, "-m", "boxvault.cli.main", *args],
        capture_output=True,
        text=True,
        timeout=30,
        cwd=_PROJECT_ROOT,
    )


def _write_descriptor(path: Path, builder_id: str, files: list[str]) -> Path:
    path.write_text(
        json.dumps({"builder_id": builder_id, "id": "virtualbox", "files": files}),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def descriptor(tmp_path: Path, box_file: Path) -> Path:
    return _write_descriptor(tmp_path / "artifact.json", VAGRANT_BUILDER_ID, [str(box_file)])


class TestHelpTexts:
    @pytest.mark.parametrize("subcommand", ["publish", "verify"])
    def test_subcommand_help_exits_zero(self, subcommand: str) -> None:
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_root_without_subcommand_exits_with_user_error(self) -> None:
        assert _run_cli().returncode == 1


class TestPublish:
    def test_publish_then_verify(
        self, tmp_config_file: Path, descriptor: Path, catalog_root: Path, tmp_path: Path
    ) -> None:
        result_file = tmp_path / "result.json"
        result = _run_cli(
            "publish",
            "--config", str(tmp_config_file),
            "--artifact", str(descriptor),
            "--result", str(result_file),
        )
        assert result.returncode == 0, result.stdout + result.stderr

        assert (catalog_root / "mybox" / "1.0.0" / "mybox.box").is_file()
        manifest = json.loads((catalog_root / "mybox.json").read_text(encoding="utf-8"))
        assert manifest["versions"][0]["providers"][0]["name"] == "virtualbox"

        produced = json.loads(result_file.read_text(encoding="utf-8"))
        assert produced["builder_id"] == BUILDER_ID
        assert produced["files"] == [str(catalog_root / "mybox.json")]

        assert _run_cli("verify", "--config", str(tmp_config_file)).returncode == 0

    def test_global_options_before_subcommand(
        self, tmp_config_file: Path, descriptor: Path, catalog_root: Path
    ) -> None:
        result = _run_cli(
            "--config", str(tmp_config_file),
            "--log-level", "DEBUG",
            "publish",
            "--artifact", str(descriptor),
        )

        assert result.returncode == 0, result.stdout + result.stderr
        assert (catalog_root / "mybox.json").is_file()

    def test_wrong_origin_is_user_error(
        self, tmp_config_file: Path, tmp_path: Path, box_file: Path, catalog_root: Path
    ) -> None:
        descriptor = _write_descriptor(tmp_path / "other.json", "mitchellh.qemu", [str(box_file)])

        result = _run_cli("publish", "--config", str(tmp_config_file), "--artifact", str(descriptor))

        assert result.returncode == 1
        assert not catalog_root.exists()

    def test_tampered_box_fails_verification(
        self, tmp_config_file: Path, descriptor: Path, catalog_root: Path
    ) -> None:
        publish = _run_cli("publish", "--config", str(tmp_config_file), "--artifact", str(descriptor))
        assert publish.returncode == 0
        (catalog_root / "mybox" / "1.0.0" / "mybox.box").write_bytes(b"tampered")

        assert _run_cli("verify", "--config", str(tmp_config_file)).returncode == 4


class TestConfigErrors:
    def test_missing_options_are_config_error(
        self, incomplete_config_file: Path, descriptor: Path
    ) -> None:
        result = _run_cli(
            "publish", "--config", str(incomplete_config_file), "--artifact", str(descriptor)
        )

        assert result.returncode == 2
        assert "box_name" in result.stdout
        assert "version" in result.stdout

    def test_nonexistent_config_is_config_error(self, descriptor: Path) -> None:
        result = _run_cli("publish", "--config", "/nonexistent/path.yaml", "--artifact", str(descriptor))
        assert result.returncode == 2

    def test_config_is_required(self, descriptor: Path) -> None:
        assert _run_cli("publish", "--artifact", str(descriptor)).returncode == 1
