"""
Value resolution services.
"""

from .registry import ValueHandle, ValueRegistry
from .value_resolver import ValueResolver

__all__ = ["ValueHandle", "ValueRegistry", "ValueResolver"]
