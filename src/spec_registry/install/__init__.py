"""Install state subpackage.

Public surface
--------------
- InstallScanner  — sets ``dir``/``installed`` and finds orphaned installs
- InstallRecord   — one on-disk install entry
"""
from __future__ import annotations

from spec_registry.install.scanner import CATEGORIES, InstallRecord, InstallScanner

__all__ = ["CATEGORIES", "InstallRecord", "InstallScanner"]
