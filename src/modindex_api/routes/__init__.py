# SPDX-License-Identifier: MIT
"""API route modules."""

from . import keys, mods

__all__ = ["keys", "mods"]
