# src/__init__.py - v1
"""tabilingo: translation pipeline for Japanese travel-blog articles."""

from tabilingo.version import __version__

__all__ = ["__version__"]
