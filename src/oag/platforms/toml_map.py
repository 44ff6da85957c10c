# TOML-based native MCP config (Codex CLI style config.toml)
import json
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from oag.errors import IntegrityError, UnsupportedServerTypeError
from oag.platforms.base import is_plain_object
from oag.utils.env import extract_bearer_env_var, extract_env_var_ref

# ABOUTME: Codex uses snake_case mcp_servers (not mcpServers)
SERVERS_KEY = "mcp_servers"
FORMAT = "toml_map"


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _as_string(value: Any) -> str:
    """Strings as is; other JSON values in their JSON spelling (true, null, 8080)."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _translate_stdio(name: str, server: dict[str, Any]) -> dict[str, Any]:
    command = server.get("command")
    if not _non_empty_string(command):
        raise IntegrityError(f"Invalid stdio server '{name}': missing command.")

    result: dict[str, Any] = {"command": command}

    args = server.get("args")
    if isinstance(args, list):
        result["args"] = [_as_string(arg) for arg in args]

    env = server.get("env")
    if is_plain_object(env):
        # Only the variable names are kept; values resolve at Codex runtime
        env_vars = {ref for ref in map(extract_env_var_ref, env.values()) if ref}
        if env_vars:
            result["env_vars"] = sorted(env_vars)

    return result


def _translate_http(name: str, server: dict[str, Any]) -> dict[str, Any]:
    url = server.get("url")
    if not _non_empty_string(url):
        raise IntegrityError(f"Invalid http server '{name}': missing url.")

    result: dict[str, Any] = {"url": url}

    static_headers: dict[str, str] = {}
    env_headers: dict[str, str] = {}
    bearer_token_env_var: str | None = None

    headers = server.get("headers")
    if is_plain_object(headers):
        for header, value in headers.items():
            if header.lower() == "authorization":
                bearer = extract_bearer_env_var(value)
                if bearer:
                    bearer_token_env_var = bearer
                    continue

            env_ref = extract_env_var_ref(value)
            if env_ref:
                env_headers[header] = env_ref
                continue

            static_headers[header] = _as_string(value)

    if static_headers:
        result["http_headers"] = static_headers
    if env_headers:
        result["env_http_headers"] = env_headers
    if bearer_token_env_var:
        result["bearer_token_env_var"] = bearer_token_env_var

    return result


# ABOUTME: One case per server type; anything missing here is unsupported
_TRANSLATORS = {
    "stdio": _translate_stdio,
    "http": _translate_http,
}


def translate_server(name: str, server: Any) -> dict[str, Any]:
    """Translate a tool-neutral MCP server into the Codex TOML schema.

    ABOUTME: stdio -> {command, args?, env_vars?}
    ABOUTME: http  -> {url, http_headers?, env_http_headers?, bearer_token_env_var?}
    ABOUTME: sse (and unknown types) are rejected - no silent downgrade

    Args:
        name: Server name (for error messages)
        server: Tool-neutral server object

    Returns:
        Codex server table

    Raises:
        UnsupportedServerTypeError: For sse or unknown types
        IntegrityError: For malformed server objects

    Examples:
        >>> translate_server("gh", {"type": "stdio", "command": "npx", "env": {"TOKEN": "${GH_TOKEN}"}})
        {'command': 'npx', 'env_vars': ['GH_TOKEN']}
    """
    if not is_plain_object(server):
        raise IntegrityError(f"Invalid MCP server '{name}': expected an object.")

    server_type = server.get("type")
    translator = _TRANSLATORS.get(server_type) if isinstance(server_type, str) else None
    if translator is None:
        raise UnsupportedServerTypeError(str(server_type), FORMAT, server_name=name)
    return translator(name, server)


class TomlMapAdapter:
    """Adapter for TOML native configs with an mcp_servers table.

    ABOUTME: Reads with tomli, writes with tomli_w
    ABOUTME: Unrelated top-level keys and tables are preserved
    """

    format = FORMAT

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

        ABOUTME: Missing file -> empty document
        ABOUTME: servers_table_created tells whether mcp_servers had to be added
        ABOUTME: Raises IntegrityError for invalid TOML or non-table mcp_servers
        """
        root: dict[str, Any] = {}
        if self._config_path.exists():
            try:
                with open(self._config_path, "rb") as f:
                    root = tomli.load(f)
            except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
                raise IntegrityError(f"Invalid TOML in {self._config_path}: {e}") from e

        self.servers_table_created = SERVERS_KEY not in root
        servers = root.setdefault(SERVERS_KEY, {})
        if not is_plain_object(servers):
            raise IntegrityError(f"Invalid TOML: {SERVERS_KEY} must be a table ({self._config_path})")
        return root, servers

    def translate(self, name: str, server: Any) -> dict[str, Any]:
        return translate_server(name, server)

    def save(self, root: dict[str, Any], servers: dict[str, Any] | None) -> None:
        if servers is None:
            root.pop(SERVERS_KEY, None)
        else:
            root[SERVERS_KEY] = servers
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "wb") as f:
            tomli_w.dump(root, f)
