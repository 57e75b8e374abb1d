"""PathFinder - incremental fuzzy search over discovered paths."""

__version__ = "0.1.0"
