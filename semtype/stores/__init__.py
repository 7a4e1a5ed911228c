"""Persistence backends for semtype."""

from .state_store import StateStore, StateStoreError

__all__ = ["StateStore", "StateStoreError"]
