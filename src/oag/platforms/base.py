# Native MCP config adapter base utilities
import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from oag.errors import IntegrityError
from oag.models import McpServerChange


def read_json_file(path: Path) -> Any | None:
    """Read JSON file with error handling.

    ABOUTME: Returns None if file doesn't exist
    ABOUTME: Raises IntegrityError for invalid JSON or non-UTF-8 content
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IntegrityError(f"Invalid JSON in {path}: {e}") from e


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file with error handling.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Uses 2-space indentation and keeps key order of foreign files
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")  # Add trailing newline


def is_plain_object(value: Any) -> bool:
    return isinstance(value, dict)


def snapshot(value: Any) -> Any:
    """Detached, JSON-serializable deep copy of a config value.

    ABOUTME: Snapshots end up in state.json, so non-JSON scalars become strings
    """
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


@runtime_checkable
class NativeConfigAdapter(Protocol):
    """Protocol for one native MCP config format.

    ABOUTME: load() returns (root document, live server map inside root)
    ABOUTME: translate() turns a tool-neutral server into the native block
    ABOUTME: servers_table_created is set by load() when the server key was absent
    """

    servers_table_created: bool

    @property
    def format(self) -> str:
        """Format identifier recorded in McpState."""
        ...

    @property
    def config_path(self) -> Path:
        """Path to the native config file."""
        ...

    def exists(self) -> bool:
        ...

    def load(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Read the native file (empty document if missing)."""
        ...

    def translate(self, name: str, server: Any) -> dict[str, Any]:
        """Translate one tool-neutral server descriptor."""
        ...

    def save(self, root: dict[str, Any], servers: dict[str, Any] | None) -> None:
        """Write root back with servers placed under the format's key (None drops the key)."""
        ...


def merge_servers(
    native_servers: dict[str, Any],
    incoming: dict[str, dict[str, Any]],
) -> dict[str, McpServerChange]:
    """Write incoming servers over native_servers and record the ledger.

    ABOUTME: Mutates native_servers in place
    ABOUTME: previous is snapshotted before the new value is written

    Args:
        native_servers: Server map of the native config (mutated)
        incoming: Already-translated servers keyed by name

    Returns:
        Ledger entry per server name

    Examples:
        >>> native = {"a": {"command": "old"}}
        >>> changes = merge_servers(native, {"a": {"command": "new"}, "b": {"command": "x"}})
        >>> changes["a"].action, changes["a"].previous
        ('replaced', {'command': 'old'})
        >>> changes["b"].action
        'added'
    """
    changes: dict[str, McpServerChange] = {}
    for name, config in incoming.items():
        had = name in native_servers
        previous = snapshot(native_servers[name]) if had else None
        native_servers[name] = config
        changes[name] = McpServerChange(
            action="replaced" if had else "added",
            previous=previous,
            installed=snapshot(config),
        )
    return changes


def unmerge_servers(native_servers: dict[str, Any], changes: dict[str, McpServerChange]) -> None:
    """Replay a ledger backwards against native_servers (mutated in place).

    ABOUTME: added -> delete key; replaced -> restore previous verbatim
    ABOUTME: replaced with no previous is treated like added
    """
    for name, change in changes.items():
        if change.action == "added" or change.previous is None:
            native_servers.pop(name, None)
        elif change.action == "replaced":
            native_servers[name] = snapshot(change.previous)
