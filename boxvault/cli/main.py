# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for boxvault.

Every operation is a subcommand of `boxvault`. The global options
(--config, --log-level) are inherited by every subcommand through argparse's
parent parser mechanism.

Usage:
    boxvault publish --config publish.yaml --artifact output/artifact.json
    boxvault verify --config publish.yaml
"""

import argparse
import sys

from boxvault.cli.commands import handle_publish, handle_verify
from boxvault.cli.exit_codes import USER_ERROR


def _build_global_parser(default: object = None) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so its help doesn't collide with the subcommand parsers.
    Subcommands get `default=argparse.SUPPRESS`, otherwise their unset
    defaults would overwrite a --config given before the subcommand name.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=default,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=default,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    publish_parser = subparsers.add_parser(
        "publish",
        parents=[parent],
        help="Copy a box into the catalog and record it in the manifest.",
    )
    publish_parser.add_argument(
        "--artifact",
        type=str,
        required=True,
        help="JSON artifact descriptor produced by the vagrant post-processor step.",
    )
    publish_parser.add_argument(
        "--result",
        type=str,
        default=None,
        help="Where to write the resulting manifest artifact descriptor.",
    )
    publish_parser.set_defaults(func=handle_publish)

    verify_parser = subparsers.add_parser(
        "verify",
        parents=[parent],
        help="Check every published box against its manifest checksum.",
    )
    verify_parser.set_defaults(func=handle_verify)


def main() -> None:
    """
    Main CLI entrypoint, referenced by pyproject.toml's [project.scripts].

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="boxvault",
        description="boxvault: publish Vagrant boxes and maintain their manifest.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(default=argparse.SUPPRESS))

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
