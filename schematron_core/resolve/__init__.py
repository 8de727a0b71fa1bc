"""
Stylesheet Resolution
=====================

Locates pipeline stylesheets below a fixed resource root.

Components:
- StylesheetResolver: root-scoped, read-only stylesheet lookup
- ResolverHook: lxml binding used while compiling and applying stylesheets
- bundled_stylesheet_root: lxml's ISO Schematron XSLT 1.0 directory
"""

from schematron_core.resolve.resolver import (
    StylesheetResolver,
    ResolverHook,
    bundled_stylesheet_root,
)

__all__ = [
    "StylesheetResolver",
    "ResolverHook",
    "bundled_stylesheet_root",
]
