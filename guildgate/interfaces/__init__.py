"""
Guildgate Interfaces — storage contracts.

Core code depends on these interfaces only.
Concrete backends live in adapters/.
"""

from guildgate.interfaces.policy_backend import (
    PolicyBackend,
    RecordKind,
    BackendUnavailable,
    PolicyNotFound,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "PolicyBackend", "RecordKind",
    "BackendUnavailable", "PolicyNotFound", "PersistenceError", "ValidationError",
]
