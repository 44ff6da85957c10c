# JSON-based native MCP config (Claude Code style .mcp.json)
from pathlib import Path
from typing import Any

from oag.errors import IntegrityError
from oag.platforms.base import is_plain_object, read_json_file, snapshot, write_json_file

# ABOUTME: Conventional wrapper key for the server map
SERVERS_KEY = "mcpServers"


def normalize_servers_shape(parsed: Any, path: Path | None = None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a JSON MCP document into (root, server map).

    ABOUTME: Wrapped form {"mcpServers": {...}} is used as is
    ABOUTME: Legacy shorthand (top-level map of objects) is wrapped
    ABOUTME: Anything else keeps its keys and gets an empty mcpServers

    Raises:
        IntegrityError: If the document is not a JSON object

    Examples:
        >>> normalize_servers_shape({"fs": {"command": "npx"}})
        ({'mcpServers': {'fs': {'command': 'npx'}}}, {'fs': {'command': 'npx'}})
    """
    where = f": {path}" if path else ""
    if not is_plain_object(parsed):
        raise IntegrityError(f"Invalid MCP config: expected a JSON object{where}")

    if is_plain_object(parsed.get(SERVERS_KEY)):
        return parsed, parsed[SERVERS_KEY]

    if SERVERS_KEY in parsed:
        raise IntegrityError(f"Invalid MCP config: '{SERVERS_KEY}' must be an object{where}")

    values = list(parsed.values())
    if values and all(is_plain_object(v) for v in values):
        return {SERVERS_KEY: parsed}, parsed

    root = dict(parsed)
    root[SERVERS_KEY] = {}
    return root, root[SERVERS_KEY]


class JsonMapAdapter:
    """Adapter for JSON native configs with an mcpServers object.

    ABOUTME: Servers are merged verbatim (no translation)
    ABOUTME: Always written in the wrapped form
    """

    format = "json_map"

    def __init__(self, config_path: Path) -> None:
        self._config_path = config_path
        self.servers_table_created = False

    @property
    def config_path(self) -> Path:
        return self._config_path

    def exists(self) -> bool:
        return self._config_path.exists()

    def load(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Load root document and live server map.

        ABOUTME: Missing file -> empty wrapped document
        ABOUTME: servers_table_created tells whether mcpServers had to be added
        """
        existing = read_json_file(self._config_path)
        if existing is None:
            self.servers_table_created = True
            return normalize_servers_shape({SERVERS_KEY: {}}, self._config_path)

        had_key = is_plain_object(existing) and SERVERS_KEY in existing
        root, servers = normalize_servers_shape(existing, self._config_path)
        # Shorthand documents hand back the original map as the servers
        self.servers_table_created = not had_key and servers is not existing
        return root, servers

    def translate(self, name: str, server: Any) -> dict[str, Any]:
        if not is_plain_object(server):
            raise IntegrityError(f"Invalid MCP server '{name}': expected an object.")
        return snapshot(server)

    def save(self, root: dict[str, Any], servers: dict[str, Any] | None) -> None:
        if servers is None:
            root.pop(SERVERS_KEY, None)
        else:
            root[SERVERS_KEY] = servers
        write_json_file(self._config_path, root)
