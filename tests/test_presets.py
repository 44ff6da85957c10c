# Tests for preset manifests
import json
from pathlib import Path

import pytest

from oag.errors import ConfigurationError
from oag.models import Asset, ToolConfig
from oag.presets import (
    get_preset_asset_ids,
    get_preset_by_name,
    load_preset,
    load_presets,
    validate_preset_assets,
)


def write_preset(registry: Path, file_name: str, manifest) -> Path:
    path = registry / "presets" / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest))
    return path


def test_load_preset(tmp_path: Path) -> None:
    """Test a valid manifest with duplicate ids collapsed."""
    path = write_preset(tmp_path, "web.json", {
        "name": " web ",
        "description": "Frontend kit",
        "tools": {"claude": ["skill/a", " skill/a ", "agent/b"], "codex": []},
    })

    preset = load_preset(path)

    assert preset.name == "web"
    assert preset.tools == {"claude": ["skill/a", "agent/b"], "codex": []}
    assert preset.label() == "web - Frontend kit"
    assert preset.file == path


@pytest.mark.parametrize(
    "manifest,message",
    [
        ([], "expected a JSON object"),
        ({"tools": {"claude": []}}, "'name' is required"),
        ({"name": "x"}, "'tools' must be an object"),
        ({"name": "x", "tools": {}}, "at least one tool"),
        ({"name": "x", "tools": {"claude": "skill/a"}}, "must be an array"),
        ({"name": "x", "tools": {"claude": [""]}}, "non-empty strings"),
        ({"name": "x", "tools": {"claude": ["skill"]}}, "invalid asset ID 'skill'"),
        ({"name": "x", "tools": {"claude": ["skill/a b"]}}, "expected type/name"),
    ],
)
def test_load_preset_invalid(tmp_path: Path, manifest, message: str) -> None:
    path = write_preset(tmp_path, "bad.json", manifest)

    with pytest.raises(ConfigurationError, match=message):
        load_preset(path)


def test_load_preset_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{")

    with pytest.raises(ConfigurationError, match="Invalid JSON in preset"):
        load_preset(path)


def test_load_presets_sorted_and_filtered(tmp_path: Path) -> None:
    write_preset(tmp_path, "b.json", {"name": "zeta", "tools": {"claude": []}})
    write_preset(tmp_path, "a.json", {"name": "alpha", "tools": {"claude": []}})
    (tmp_path / "presets" / "notes.txt").write_text("ignored")

    presets = load_presets(tmp_path)

    assert [p.name for p in presets] == ["alpha", "zeta"]
    assert get_preset_by_name(presets, "zeta") is presets[1]
    assert get_preset_by_name(presets, "missing") is None
    assert get_preset_by_name(presets, None) is None


def test_load_presets_duplicate_names(tmp_path: Path) -> None:
    write_preset(tmp_path, "a.json", {"name": "same", "tools": {"claude": []}})
    write_preset(tmp_path, "b.json", {"name": "same", "tools": {"codex": []}})

    with pytest.raises(ConfigurationError, match="Duplicate preset name 'same'"):
        load_presets(tmp_path)


def test_load_presets_without_directory(tmp_path: Path) -> None:
    assert load_presets(tmp_path) == []


def test_get_preset_asset_ids(tmp_path: Path) -> None:
    preset = load_preset(write_preset(tmp_path, "p.json", {"name": "p", "tools": {"claude": ["skill/a"]}}))

    assert get_preset_asset_ids(preset, "claude") == ["skill/a"]
    assert get_preset_asset_ids(preset, "codex") is None


class TestValidatePresetAssets:
    """Tests for checking preset ids against the registry."""

    def setup_method(self):
        self.tool = ToolConfig(name="codex", paths={"skill": ".codex/skills/"})
        self.assets = {
            "skill/a": Asset(id="skill/a", type="skill", name="a", dir=Path("/r/a")),
            "skill/claude-only": Asset(
                id="skill/claude-only", type="skill", name="claude-only", dir=Path("/r/c"), tools=("claude",)
            ),
            "agent/x": Asset(id="agent/x", type="agent", name="x", dir=Path("/r/x")),
        }

    def test_valid_ids_are_returned_once(self, tmp_path: Path) -> None:
        preset = load_preset(write_preset(tmp_path, "p.json", {"name": "p", "tools": {"codex": ["skill/a"]}}))

        assert validate_preset_assets(preset, "codex", ["skill/a", "skill/a"], self.assets, self.tool) == ["skill/a"]

    def test_collects_every_problem(self, tmp_path: Path) -> None:
        preset = load_preset(write_preset(tmp_path, "p.json", {"name": "p", "tools": {"codex": []}}))

        with pytest.raises(ConfigurationError) as exc_info:
            validate_preset_assets(
                preset,
                "codex",
                ["skill/ghost", "skill/claude-only", "agent/x", "skill/a"],
                self.assets,
                self.tool,
            )

        message = str(exc_info.value)
        assert "skill/ghost: asset not found in registry" in message
        assert "skill/claude-only: asset is not compatible with tool 'codex'" in message
        assert "agent/x: no path mapping for type 'agent'" in message
        assert "- skill/a:" not in message
