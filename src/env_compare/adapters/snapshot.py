"""Read-only console client backed by JSON environment exports.

Provides ``SnapshotConsoleClient``, a ``ConsoleClient`` that reads one
JSON export per environment from disk.  Useful for comparing exports
offline and in tests.  Every mutation raises ``NotImplementedError``.

Export format::

    {
      "id": "A1B2",
      "name": "production",
      "tables": [{"name": "Book", "columns": [...], "relations": [...]}],
      "apiKeys": ["REST", "JS"]
    }

Usage:
    from env_compare.adapters.snapshot import SnapshotConsoleClient

    client = SnapshotConsoleClient({"A1B2": "exports/production.json"})
    env = await client.fetch_environment("A1B2")
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from env_compare.schema.models import Environment


class SnapshotConsoleClient:
    """``ConsoleClient`` reading environment exports from JSON files.

    Files are re-read on every ``fetch_environment()`` call so a re-fetch
    after table sync sees the current file contents.

    Args:
        snapshots: Mapping of environment id to export file path.
    """

    def __init__(self, snapshots: dict[str, str | Path]) -> None:
        self._snapshots: dict[str, Path] = {
            env_id: Path(path) for env_id, path in snapshots.items()
        }

    async def fetch_environment(self, environment_id: str) -> Environment:
        """Load and validate the export for *environment_id*.

        Raises:
            KeyError: If no snapshot is registered for the id.
            FileNotFoundError: If the export file does not exist.
            ValueError: If the file is not a valid environment export.
        """
        if environment_id not in self._snapshots:
            raise KeyError(f"No snapshot registered for environment '{environment_id}'")

        path = self._snapshots[environment_id]
        if not path.exists():
            raise FileNotFoundError(f"Environment export not found: {path}")

        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path.name}: {e}") from e

        data.setdefault("id", environment_id)
        data.setdefault("name", environment_id)

        try:
            return Environment.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid environment export {path.name}: {e}") from e

    async def add_table(self, environment_id: str, table_name: str) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def remove_table(self, environment_id: str, table_name: str) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def add_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def update_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def remove_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def bulk_update(
        self,
        environment_id: str,
        table_name: str,
        where_clause: str,
        values: dict[str, Any],
    ) -> None:
        raise NotImplementedError("Snapshot client is read-only")

    async def cleanup(self, environment_ids: list[str]) -> None:
        """Nothing to clean up for file-backed snapshots."""
        return None
