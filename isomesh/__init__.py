"""Isosurface extraction from regular scalar volumes."""

__version__ = "1.0.0"
