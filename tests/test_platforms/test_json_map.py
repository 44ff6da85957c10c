# Tests for the JSON native MCP config adapter
import json
from pathlib import Path

import pytest

from oag.errors import IntegrityError
from oag.platforms import JsonMapAdapter, get_adapter, merge_servers, unmerge_servers
from oag.platforms.json_map import normalize_servers_shape


class TestNormalizeServersShape:
    """Tests for normalize_servers_shape."""

    def test_wrapped_form_is_kept(self):
        parsed = {"mcpServers": {"fs": {"command": "npx"}}, "other": 1}

        root, servers = normalize_servers_shape(parsed)

        assert root is parsed
        assert servers is parsed["mcpServers"]

    def test_shorthand_is_wrapped(self):
        root, servers = normalize_servers_shape({"fs": {"command": "npx"}, "gh": {"url": "x"}})

        assert list(root) == ["mcpServers"]
        assert list(servers) == ["fs", "gh"]

    def test_unrelated_keys_get_empty_server_map(self):
        root, servers = normalize_servers_shape({"theme": "dark"})

        assert root == {"theme": "dark", "mcpServers": {}}
        assert servers == {}

    def test_empty_object(self):
        root, servers = normalize_servers_shape({})
        assert root == {"mcpServers": {}}

    def test_non_object_document(self):
        with pytest.raises(IntegrityError, match="expected a JSON object"):
            normalize_servers_shape([1, 2])

    def test_non_object_server_map(self):
        with pytest.raises(IntegrityError, match="must be an object"):
            normalize_servers_shape({"mcpServers": []})


def test_adapter_properties(tmp_path: Path) -> None:
    """Test format id and path."""
    adapter = JsonMapAdapter(tmp_path / ".mcp.json")

    assert adapter.format == "json_map"
    assert adapter.config_path == tmp_path / ".mcp.json"
    assert adapter.exists() is False


def test_load_missing_file(tmp_path: Path) -> None:
    """Test loading when config doesn't exist."""
    adapter = JsonMapAdapter(tmp_path / ".mcp.json")
    root, servers = adapter.load()

    assert root == {"mcpServers": {}}
    assert servers == {}
    assert adapter.servers_table_created is True


def test_load_reports_added_server_key(tmp_path: Path) -> None:
    """Test servers_table_created for each document shape."""
    config_file = tmp_path / ".mcp.json"
    adapter = JsonMapAdapter(config_file)

    config_file.write_text(json.dumps({"theme": "dark"}))
    adapter.load()
    assert adapter.servers_table_created is True

    config_file.write_text(json.dumps({"mcpServers": {}}))
    adapter.load()
    assert adapter.servers_table_created is False

    config_file.write_text(json.dumps({"fs": {"command": "npx"}}))
    adapter.load()
    assert adapter.servers_table_created is False


def test_load_invalid_json(tmp_path: Path) -> None:
    """Test loading invalid JSON raises IntegrityError."""
    config_file = tmp_path / ".mcp.json"
    config_file.write_text("{invalid json")

    with pytest.raises(IntegrityError, match="Invalid JSON"):
        JsonMapAdapter(config_file).load()


def test_load_non_utf8_file(tmp_path: Path) -> None:
    config_file = tmp_path / ".mcp.json"
    config_file.write_bytes(b'{"a": "\xff"}')

    with pytest.raises(IntegrityError, match="Invalid JSON"):
        JsonMapAdapter(config_file).load()


def test_invalid_json_is_a_value_error(tmp_path: Path) -> None:
    """Test callers catching ValueError still see integrity failures."""
    config_file = tmp_path / ".mcp.json"
    config_file.write_text("[")

    with pytest.raises(ValueError):
        JsonMapAdapter(config_file).load()


def test_translate_is_verbatim_copy() -> None:
    """Test JSON servers pass through unchanged but detached."""
    server = {"type": "sse", "url": "https://example.com/sse", "headers": {"X": "1"}}
    adapter = JsonMapAdapter(Path("unused.json"))

    translated = adapter.translate("events", server)

    assert translated == server
    translated["headers"]["X"] = "2"
    assert server["headers"]["X"] == "1"


def test_translate_rejects_non_object() -> None:
    with pytest.raises(IntegrityError, match="expected an object"):
        JsonMapAdapter(Path("unused.json")).translate("bad", "npx")


def test_save_writes_wrapped_form_and_keeps_other_keys(tmp_path: Path) -> None:
    """Test save preserves unrelated top-level keys."""
    config_file = tmp_path / "nested" / ".mcp.json"
    config_file.parent.mkdir()
    config_file.write_text(json.dumps({"theme": "dark", "mcpServers": {}}))
    adapter = JsonMapAdapter(config_file)

    root, servers = adapter.load()
    servers["fs"] = {"command": "npx"}
    adapter.save(root, servers)

    text = config_file.read_text()
    assert text.endswith("}\n")
    assert json.loads(text) == {"theme": "dark", "mcpServers": {"fs": {"command": "npx"}}}


def test_save_creates_parent_dirs(tmp_path: Path) -> None:
    config_file = tmp_path / "a" / "b" / ".mcp.json"
    adapter = JsonMapAdapter(config_file)

    root, servers = adapter.load()
    adapter.save(root, servers)

    assert json.loads(config_file.read_text()) == {"mcpServers": {}}


class TestMergeLedger:
    """Tests for merge_servers / unmerge_servers."""

    def test_merge_then_unmerge_restores_map(self):
        native = {"keep": {"command": "a"}, "gh": {"command": "old"}}
        original = json.loads(json.dumps(native))

        changes = merge_servers(native, {"gh": {"command": "new"}, "fs": {"command": "npx"}})

        assert native["gh"] == {"command": "new"}
        assert changes["gh"].action == "replaced"
        assert changes["gh"].previous == {"command": "old"}
        assert changes["fs"].action == "added"
        assert changes["fs"].previous is None

        unmerge_servers(native, changes)

        assert native == original
        assert list(native) == list(original)

    def test_installed_snapshot_is_detached(self):
        incoming = {"fs": {"args": ["a"]}}
        changes = merge_servers({}, incoming)

        incoming["fs"]["args"].append("b")

        assert changes["fs"].installed == {"args": ["a"]}

    def test_unmerge_missing_key_is_noop(self):
        native = {"keep": {}}
        changes = merge_servers({}, {"gone": {"command": "x"}})

        unmerge_servers(native, changes)

        assert native == {"keep": {}}


def test_get_adapter_accepts_legacy_format_name(tmp_path: Path) -> None:
    """Test older state files naming the format after the tool."""
    adapter = get_adapter("claude_json", tmp_path / ".mcp.json")
    assert isinstance(adapter, JsonMapAdapter)
