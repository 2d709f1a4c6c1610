"""
Tether Utils
============

Support containers used by the binding engine.

Classes:
- WeakCollection: Ordered, non-owning membership with dead-entry skipping
"""

from .weak_collection import WeakCollection

__all__ = ["WeakCollection"]
