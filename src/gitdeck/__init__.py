"""
gitdeck package root.

File: src/gitdeck/__init__.py

Purpose
- Package root. Defines package-level metadata and import boundaries.

Import boundary rules
- No side effects at import time (no config loading, no logging init).
- Heavy submodules (Textual app, engine) are imported lazily by callers.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
