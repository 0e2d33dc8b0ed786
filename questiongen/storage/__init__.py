"""Output naming and the retention sweep."""

from .retention import sweep_expired_files

__all__ = ["sweep_expired_files"]
