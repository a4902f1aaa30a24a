# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
boxvault: publishes packaged Vagrant boxes into a filesystem box catalog and
keeps its versioned, checksummed manifest up to date.
"""

__version__ = "0.1.0"
