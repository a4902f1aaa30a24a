# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Box publishing: destination backends, the manifest store, the publisher and
the manifest verifier.
"""
