"""
Concurrency primitives.
"""

from .lock_manager import KeyedLockManager

__all__ = ["KeyedLockManager"]
