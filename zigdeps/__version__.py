"""
zigdeps version information.

Single source of truth for the package version (Semantic Versioning).
"""

from __future__ import annotations

__version__ = "0.1.0"

VERSION_STRING = f"zigdeps {__version__}"
