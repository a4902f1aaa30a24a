# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised while publishing a box.

Filesystem failures are not wrapped: they surface as the builtin OSError
family, which already carries the failing path.
"""


class PublishError(Exception):
    """Base for everything the publisher raises on its own account."""


class UnsupportedSourceError(PublishError):
    """
    The artifact handed to the publisher didn't come from the Vagrant
    post-processor, or doesn't contain a .box file.
    """


class ManifestError(PublishError):
    """Base for manifest document problems."""


class ManifestParseError(ManifestError, ValueError):
    """An existing manifest is not valid JSON or doesn't match the schema."""


class ManifestValidationError(ManifestError, ValueError):
    """A provider entry was rejected before being merged into a manifest."""
