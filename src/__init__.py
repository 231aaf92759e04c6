"""semcache: tiered semantic cache for AI feedback analysis."""

from semcache.version import __version__

__all__ = ["__version__"]
