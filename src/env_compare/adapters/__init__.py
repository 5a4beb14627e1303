"""Console client package.

Provides the ``ConsoleClient`` Protocol and the read-only
``SnapshotConsoleClient`` backed by JSON environment exports.

Usage:
    from env_compare.adapters import ConsoleClient, SnapshotConsoleClient
"""

from env_compare.adapters.base import ConsoleClient, MutationError, error_message
from env_compare.adapters.snapshot import SnapshotConsoleClient

__all__ = [
    "ConsoleClient",
    "MutationError",
    "error_message",
    "SnapshotConsoleClient",
]
