"""
Example todo-list CLI that keeps its data in a remote JSON store.
"""

from .models import Metadata, Todo

__all__ = ["Metadata", "Todo"]
