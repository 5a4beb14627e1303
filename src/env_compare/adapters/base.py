"""Console client protocol definition.

Defines the ``ConsoleClient`` Protocol that every backend console client
must implement: environment retrieval plus the schema mutation API used by
``schema.sync``.  All methods are ``async def``.

Transport, authentication and retries are the client's business; the
comparison and sync code only relies on this interface.

Usage:
    from env_compare.adapters.base import ConsoleClient

    async def do_work(client: ConsoleClient) -> None:
        env = await client.fetch_environment("A1B2")
        await client.add_table(env.id, "Orders")
        await client.add_column(env.id, "Orders", {"name": "total", "dataType": "DOUBLE"})
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from env_compare.schema.models import Environment


class MutationError(Exception):
    """Raised by clients when a mutation call is rejected.

    Args:
        message: Short description of the failed call.
        response: Optional response payload; its ``message`` field, when
            present, is the human-readable cause.
    """

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


def error_message(err: BaseException) -> str:
    """Extract the human-readable cause of a failed mutation.

    Looks for ``err.response`` and then for a ``message`` in its payload
    (``response["message"]``, ``response["data"]["message"]``,
    ``response.data["message"]`` or ``response.message``).  Falls back to ``str(err)``.

    Example:
        >>> error_message(MutationError("add failed", {"message": "Table exists"}))
        'Table exists'
    """
    response = getattr(err, "response", None)
    if response is not None:
        payload = getattr(response, "data", response)
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if isinstance(payload, dict):
            message = payload.get("message")
        else:
            message = getattr(payload, "message", None)
        if message:
            return str(message)
    return str(err)


class ConsoleClient(Protocol):
    """Backend console interface that all clients must implement.

    Mutation methods raise on failure (preferably ``MutationError``).
    Read-only clients raise ``NotImplementedError`` from every mutation.
    """

    async def fetch_environment(self, environment_id: str) -> "Environment":
        """Fetch an environment's tables, relations, columns and API keys.

        Args:
            environment_id: Environment (application) id.

        Returns:
            Fresh ``Environment`` export.
        """
        ...

    async def add_table(self, environment_id: str, table_name: str) -> None:
        """Create an empty table."""
        ...

    async def remove_table(self, environment_id: str, table_name: str) -> None:
        """Delete a table and its data."""
        ...

    async def add_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        """Create a column or relation.

        Args:
            environment_id: Target environment id.
            table_name: Table receiving the column.
            column: camelCase column or relation definition.  Relation
                identification metadata is already in the target's id space.
        """
        ...

    async def update_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        """Update a column definition; ``column["columnId"]`` is the target's id."""
        ...

    async def remove_column(self, environment_id: str, table_name: str, column: dict[str, Any]) -> None:
        """Delete a column or relation."""
        ...

    async def bulk_update(
        self,
        environment_id: str,
        table_name: str,
        where_clause: str,
        values: dict[str, Any],
    ) -> None:
        """Set *values* on every row matching *where_clause*.

        Example:
            await client.bulk_update(env_id, "Order", "status is null", {"status": "new"})
        """
        ...

    async def cleanup(self, environment_ids: list[str]) -> None:
        """Reconcile residual state left by mutations (caches etc.)."""
        ...
