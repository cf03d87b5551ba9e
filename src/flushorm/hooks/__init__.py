"""
Lifecycle hooks fired around entity writes and transaction completion.
"""

from .dispatcher import LIFECYCLE_EVENTS, HookDispatcher, hooks

__all__ = ["HookDispatcher", "LIFECYCLE_EVENTS", "hooks"]
