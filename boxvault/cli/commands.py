# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the boxvault CLI.

Each handler returns an exit code; exceptions from the library are caught
here, logged with their context, and mapped to exit codes. No print() calls.
Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path

from boxvault.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from boxvault.config.exceptions import ConfigError
from boxvault.config.loader import load_config
from boxvault.config.schema import BoxVaultConfig
from boxvault.logging.logger import get_logger, set_log_level
from boxvault.publish.artifact import read_artifact, write_artifact
from boxvault.publish.destination import FilesystemDestination
from boxvault.publish.errors import ManifestError, UnsupportedSourceError
from boxvault.publish.publisher import Publisher, manifest_location
from boxvault.publish.verifier import verify_manifest


def _load_and_setup(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, BoxVaultConfig | None, logging.Logger]:
    """
    The shared setup every command needs: load config, apply log settings.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS, the
    caller should return it immediately.
    """
    logger = get_logger(f"boxvault.cli.{command_name}", log_level=args.log_level or "INFO")

    if args.config is None:
        logger.error("A config file is required", extra={"command": command_name})
        return USER_ERROR, None, logger

    try:
        config = load_config(Path(args.config))
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={
                "command": command_name,
                "error": str(err),
                "missing": getattr(err, "missing", []),
            },
        )
        return CONFIG_ERROR, None, logger

    global_config = config.global_config
    log_file = Path(global_config.log_file) if global_config.log_file else None
    set_log_level(args.log_level or global_config.log_level, log_file=log_file)

    return SUCCESS, config, logger


def handle_publish(args: argparse.Namespace) -> int:
    """Publish the box described by --artifact and update the manifest."""
    exit_code, config, logger = _load_and_setup(args, "publish")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        artifact = read_artifact(Path(args.artifact))
    except (OSError, ValueError) as err:
        logger.error(
            "Cannot read artifact descriptor",
            extra={"artifact": args.artifact, "error": str(err)},
        )
        return USER_ERROR

    publisher = Publisher(config.publish, FilesystemDestination())
    try:
        result = publisher.publish(artifact)
    except UnsupportedSourceError as err:
        logger.error("Unsupported artifact", extra={"artifact": str(artifact), "error": str(err)})
        return USER_ERROR
    except ManifestError as err:
        logger.error("Manifest error", extra={"error": str(err)})
        return VALIDATION_ERROR
    except OSError as err:
        logger.error(
            "Publish failed",
            extra={"error": str(err), "path": err.filename},
            exc_info=True,
        )
        return RUNTIME_ERROR

    if args.result is not None:
        try:
            write_artifact(result, Path(args.result))
        except OSError as err:
            logger.error(
                "Cannot write result artifact",
                extra={"result": args.result, "error": str(err)},
            )
            return RUNTIME_ERROR

    logger.info("Publish completed", extra={"artifact": str(result)})
    return SUCCESS


def handle_verify(args: argparse.Namespace) -> int:
    """Check every box listed in the configured manifest against its checksum."""
    exit_code, config, logger = _load_and_setup(args, "verify")
    if exit_code != SUCCESS or config is None:
        return exit_code

    location = manifest_location(config.publish)
    try:
        report = verify_manifest(location, FilesystemDestination())
    except FileNotFoundError as err:
        logger.error("Manifest not found", extra={"manifest": location, "error": str(err)})
        return USER_ERROR
    except ManifestError as err:
        logger.error("Manifest error", extra={"manifest": location, "error": str(err)})
        return VALIDATION_ERROR
    except OSError as err:
        logger.error("Verification failed", extra={"manifest": location, "error": str(err)})
        return RUNTIME_ERROR

    if not report.is_valid:
        logger.error(
            "Manifest verification failed",
            extra={
                "manifest": location,
                "mismatches": report.mismatches,
                "missing_files": report.missing_files,
            },
        )
        return VALIDATION_ERROR

    logger.info(
        "Manifest verified",
        extra={"manifest": location, "checked_count": report.checked_count},
    )
    return SUCCESS
