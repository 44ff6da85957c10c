# Core data models for oag
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

InstallMode = Literal["copy", "symlink"]
McpFormat = Literal["json_map", "toml_map"]
ServerAction = Literal["added", "replaced"]

# ABOUTME: Asset types whose records are carried through but never reconciled
LEGACY_TYPES = frozenset({"hook"})


def type_from_id(asset_id: str) -> str:
    """Return the type prefix of an asset id ("skill/foo" -> "skill")."""
    return str(asset_id or "").split("/")[0]


@dataclass(frozen=True)
class AssetFile:
    """One file declared by an asset manifest, relative to the asset dir."""
    source: str


@dataclass(frozen=True)
class Asset:
    """Immutable asset supplied by the registry.

    ABOUTME: id has the form "<type>/<name>" and is globally unique
    ABOUTME: tools=None means compatible with every tool
    """
    id: str
    type: str
    name: str
    dir: Path
    files: tuple[AssetFile, ...] = ()
    tools: tuple[str, ...] | None = None
    description: str = ""

    def source_path(self, file: AssetFile) -> Path:
        """Absolute path of one declared file."""
        return self.dir / file.source


@dataclass(frozen=True)
class ToolConfig:
    """Per-tool destination layout.

    ABOUTME: paths maps asset type -> mapping string relative to the project
    ABOUTME: mcp_format overrides the native MCP format inferred from paths["mcp"]
    """
    name: str
    paths: dict[str, str] = field(default_factory=dict)
    mcp_format: McpFormat | None = None


@dataclass
class McpServerChange:
    """Ledger entry for one server merged into a native config.

    ABOUTME: Replaying action against previous exactly undoes installed
    """
    action: ServerAction
    installed: Any
    previous: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action, "previous": self.previous, "installed": self.installed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpServerChange":
        action = data.get("action")
        if action not in ("added", "replaced"):
            raise ValueError(f"Invalid MCP server action: {action!r}")
        return cls(action=action, installed=data.get("installed"), previous=data.get("previous"))


@dataclass
class McpState:
    """Reversible merge record for one MCP asset.

    ABOUTME: created_file/created_table mark what the install brought into being
    ABOUTME: They are serialized only when set, so older records read back unchanged
    """
    format: str
    config_path: str
    servers: dict[str, McpServerChange] = field(default_factory=dict)
    created_file: bool = False
    created_table: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "format": self.format,
            "configPath": self.config_path,
            "servers": {name: change.to_dict() for name, change in self.servers.items()},
        }
        if self.created_file:
            result["createdFile"] = True
        if self.created_table:
            result["createdTable"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpState":
        servers = data.get("servers")
        if not isinstance(servers, dict):
            raise ValueError("MCP state 'servers' must be an object")
        return cls(
            format=str(data.get("format", "")),
            config_path=str(data.get("configPath", "")),
            servers={
                name: McpServerChange.from_dict(entry)
                for name, entry in servers.items()
                if isinstance(entry, dict)
            },
            created_file=bool(data.get("createdFile")),
            created_table=bool(data.get("createdTable")),
        )


@dataclass
class InstalledItem:
    """What was materialized for one enabled asset, and how to undo it.

    ABOUTME: Serialized with camelCase keys (baseDir, configPath)
    ABOUTME: Unknown keys of older records survive in extra
    """
    targets: list[str] = field(default_factory=list)
    mode: str = "copy"
    commit: str = "unknown"
    base_dir: str | None = None
    mcp: McpState | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = dict(self.extra)
        result["targets"] = list(self.targets)
        result["mode"] = self.mode
        result["commit"] = self.commit
        if self.base_dir:
            result["baseDir"] = self.base_dir
        if self.mcp is not None:
            result["mcp"] = self.mcp.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstalledItem":
        known = {"targets", "mode", "commit", "baseDir", "mcp"}
        targets = data.get("targets", [])
        if not isinstance(targets, list):
            raise ValueError("'targets' must be a list")
        mcp_data = data.get("mcp")
        base_dir = data.get("baseDir")
        return cls(
            targets=[str(t) for t in targets],
            mode=str(data.get("mode", "copy")),
            commit=str(data.get("commit", "unknown")),
            base_dir=base_dir if isinstance(base_dir, str) and base_dir.strip() else None,
            mcp=McpState.from_dict(mcp_data) if isinstance(mcp_data, dict) else None,
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class ToolState:
    """Installed items of one tool, in enablement order."""
    items: dict[str, InstalledItem] = field(default_factory=dict)


@dataclass
class StateFile:
    """Whole persisted state of a project."""
    tools: dict[str, ToolState] = field(default_factory=dict)

    def tool(self, name: str) -> ToolState:
        """Return the state of a tool (empty if never installed)."""
        return self.tools.get(name) or ToolState()

    def to_dict(self) -> dict[str, Any]:
        return {
            "tools": {
                name: {"items": {aid: item.to_dict() for aid, item in ts.items.items()}}
                for name, ts in self.tools.items()
            }
        }


@dataclass(frozen=True)
class SkippedAsset:
    """An asset left out of an install run, with the reason."""
    id: str
    reason: str


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation run for one tool.

    ABOUTME: changed=False means the run was a no-op and state was not written
    """
    tool: str
    installed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[SkippedAsset] = field(default_factory=list)
    legacy_preserved: list[str] = field(default_factory=list)
    changed: bool = False

    def add_skipped(self, asset_id: str, reason: str) -> None:
        self.skipped.append(SkippedAsset(id=asset_id, reason=reason))
