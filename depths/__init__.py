"""Procedural dungeon levels and the data-driven raw catalog that populates them."""

__all__ = ["mapgen", "raws"]
