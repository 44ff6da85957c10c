# Tests for configuration loading
import json
from pathlib import Path

import pytest

from oag.config import (
    CONFIG_FILE,
    DEFAULT_TOOLS,
    OagConfig,
    ensure_config_dir,
    get_config_path,
    load_config,
    save_config,
)
from oag.errors import ConfigurationError
from oag.models import ToolConfig


def test_get_config_path():
    """Test getting config file path."""
    path = get_config_path()
    assert path == CONFIG_FILE
    assert path.name == "config.json"
    assert ".oag" in str(path)


def test_ensure_config_dir(tmp_path, monkeypatch):
    """Test creating config directory."""
    monkeypatch.setattr("oag.config.CONFIG_DIR", tmp_path / ".oag")

    result = ensure_config_dir()

    assert result == tmp_path / ".oag"
    assert result.is_dir()


def test_load_valid_config(tmp_path):
    """Test loading a valid JSON config file."""
    config_file = tmp_path / "config.json"
    config_content = {
        "registry": {"path": "/srv/registry"},
        "tools": {
            "claude": {"paths": {"skill": ".claude/skills/", "mcp": ".mcp.json"}},
            "codex": {"paths": {"mcp": ".codex/config.toml"}, "mcpFormat": "toml_map"},
        },
    }
    config_file.write_text(json.dumps(config_content, indent=2))

    config = load_config(config_file)

    assert config.registry_path == Path("/srv/registry")
    assert list(config.tools) == ["claude", "codex"]
    assert config.tools["claude"] == ToolConfig(
        name="claude", paths={"skill": ".claude/skills/", "mcp": ".mcp.json"}
    )
    assert config.tools["codex"].mcp_format == "toml_map"


def test_load_config_defaults_tools(tmp_path):
    """Test that a config without tools falls back to the built-in layouts."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"registry": {"path": "/r"}, "tools": {}}))

    config = load_config(config_file)

    assert config.tools == DEFAULT_TOOLS
    assert config.get_tool("codex").paths["mcp"] == ".codex/config.toml"


def test_registry_path_expands_env_vars(tmp_path, monkeypatch):
    """Test ${VAR} and ~ in registry.path."""
    monkeypatch.setenv("OAG_TEST_REGISTRY", "/data/registry")
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"registry": {"path": "${OAG_TEST_REGISTRY}/main"}}))

    assert load_config(config_file).registry_path == Path("/data/registry/main")

    config_file.write_text(json.dumps({"registry": {"path": "~/registry"}}))
    assert load_config(config_file).registry_path == Path.home() / "registry"


def test_load_missing_file(tmp_path):
    """Test loading non-existent file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_config(tmp_path / "nonexistent.json")


def test_load_invalid_json(tmp_path):
    """Test loading invalid JSON raises ConfigurationError."""
    config_file = tmp_path / "config.json"
    config_file.write_text("{invalid json")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_config(config_file)


@pytest.mark.parametrize(
    "content,message",
    [
        ([], "must be a JSON object"),
        ({"tools": []}, "'tools' section must be an object"),
        ({"tools": {"claude": "x"}}, "Tool 'claude' must be an object"),
        ({"tools": {"claude": {}}}, "needs a 'paths' object"),
        ({"tools": {"claude": {"paths": {"skill": 1}}}}, "needs a 'paths' object"),
        ({"tools": {"claude": {"paths": {}, "mcpFormat": "yaml"}}}, "invalid mcpFormat 'yaml'"),
        ({"registry": "path"}, "'registry' section must be an object"),
    ],
)
def test_load_malformed_sections(tmp_path, content, message):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(content))

    with pytest.raises(ConfigurationError, match=message):
        load_config(config_file)


def test_get_tool_unknown():
    with pytest.raises(ConfigurationError, match="Tool 'cursor' is not configured"):
        OagConfig().get_tool("cursor")


def test_save_then_load(tmp_path):
    """Test a saved config reads back the same."""
    config = OagConfig(
        tools={"codex": ToolConfig(name="codex", paths={"skill": "skills/"}, mcp_format="toml_map")},
        registry_path=Path("/srv/registry"),
    )
    config_file = tmp_path / "nested" / "config.json"

    save_config(config_file, config)

    assert config_file.read_text().endswith("\n")
    assert load_config(config_file) == config
