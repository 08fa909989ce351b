"""Durable storage backends for the tracker state."""

from .contracts import ConfigurationError, PersistenceAdapter, PersistenceError
from .local import LocalStorageAdapter
from .remote import JsonBinAdapter

__all__ = [
    "ConfigurationError",
    "PersistenceAdapter",
    "PersistenceError",
    "LocalStorageAdapter",
    "JsonBinAdapter",
]
