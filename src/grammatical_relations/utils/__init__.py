"""Shared helpers: hierarchy validation and the registry's reader/writer lock."""

from .locks import ReadWriteLock
from .validators import HierarchyValidator

__all__ = ["ReadWriteLock", "HierarchyValidator"]
