# Preset manifests: named asset sets per tool
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from oag.errors import ConfigurationError
from oag.models import Asset, ToolConfig
from oag.registry import is_tool_supported

PRESETS_DIR = "presets"

# ABOUTME: Asset ids must look like "type/name" with no whitespace
ASSET_ID_PATTERN = re.compile(r"^[^/\s]+/[^/\s]+$")


@dataclass(frozen=True)
class Preset:
    name: str
    tools: dict[str, list[str]]
    description: str = ""
    file: Path | None = field(default=None, compare=False)

    def label(self) -> str:
        return f"{self.name} - {self.description}" if self.description else self.name


def _normalize_asset_ids(manifest_path: Path, tool: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigurationError(f"Invalid preset: {manifest_path} (tools.{tool} must be an array).")

    ids: list[str] = []
    for raw in value:
        if not isinstance(raw, str) or not raw.strip():
            raise ConfigurationError(
                f"Invalid preset: {manifest_path} (tools.{tool} must contain non-empty strings)."
            )
        asset_id = raw.strip()
        if not ASSET_ID_PATTERN.match(asset_id):
            raise ConfigurationError(
                f"Invalid preset: {manifest_path} (invalid asset ID '{asset_id}', expected type/name)."
            )
        if asset_id not in ids:
            ids.append(asset_id)
    return ids


def load_preset(manifest_path: Path) -> Preset:
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in preset: {manifest_path}") from e

    if not isinstance(manifest, dict):
        raise ConfigurationError(f"Invalid preset: {manifest_path} (expected a JSON object).")

    name = manifest.get("name").strip() if isinstance(manifest.get("name"), str) else ""
    if not name:
        raise ConfigurationError(f"Invalid preset: {manifest_path} ('name' is required).")

    tools_data = manifest.get("tools")
    if not isinstance(tools_data, dict):
        raise ConfigurationError(f"Invalid preset: {manifest_path} ('tools' must be an object).")

    tools = {tool: _normalize_asset_ids(manifest_path, tool, ids) for tool, ids in tools_data.items()}
    if not tools:
        raise ConfigurationError(f"Invalid preset: {manifest_path} ('tools' must define at least one tool).")

    description = manifest.get("description")
    return Preset(
        name=name,
        tools=tools,
        description=description.strip() if isinstance(description, str) else "",
        file=manifest_path,
    )


def load_presets(registry_path: Path) -> list[Preset]:
    """Load every presets/*.json manifest of a registry checkout.

    ABOUTME: Names must be unique; result is sorted by name

    Raises:
        ConfigurationError: On invalid manifests or duplicate names
    """
    presets_root = Path(registry_path) / PRESETS_DIR
    if not presets_root.is_dir():
        return []

    presets: list[Preset] = []
    names: set[str] = set()
    for manifest_path in sorted(presets_root.iterdir()):
        if not manifest_path.is_file() or manifest_path.suffix.lower() != ".json":
            continue
        preset = load_preset(manifest_path)
        if preset.name in names:
            raise ConfigurationError(f"Duplicate preset name '{preset.name}' in {presets_root}.")
        names.add(preset.name)
        presets.append(preset)

    presets.sort(key=lambda p: p.name)
    return presets


def get_preset_by_name(presets: list[Preset], name: str | None) -> Preset | None:
    if not name:
        return None
    return next((preset for preset in presets if preset.name == name), None)


def get_preset_asset_ids(preset: Preset, tool: str) -> list[str] | None:
    """Asset ids of a preset for a tool, or None if the preset skips the tool."""
    if tool not in preset.tools:
        return None
    return list(preset.tools[tool])


def validate_preset_assets(
    preset: Preset,
    tool: str,
    asset_ids: list[str],
    assets_by_id: dict[str, Asset],
    tool_config: ToolConfig,
) -> list[str]:
    """Check every preset id against the registry and the tool layout.

    ABOUTME: Collects all problems and raises them together

    Returns:
        De-duplicated valid ids, in preset order

    Raises:
        ConfigurationError: Listing every unknown, incompatible or unmapped id
    """
    errors: list[str] = []
    valid: list[str] = []

    for asset_id in dict.fromkeys(asset_ids):
        asset = assets_by_id.get(asset_id)
        if asset is None:
            errors.append(f"- {asset_id}: asset not found in registry")
        elif not is_tool_supported(asset, tool):
            errors.append(f"- {asset_id}: asset is not compatible with tool '{tool}'")
        elif not tool_config.paths.get(asset.type):
            errors.append(f"- {asset_id}: no path mapping for type '{asset.type}' on tool '{tool}'")
        else:
            valid.append(asset_id)

    if errors:
        raise ConfigurationError(
            f"Preset '{preset.name}' has invalid assets for tool '{tool}':\n" + "\n".join(errors)
        )
    return valid
