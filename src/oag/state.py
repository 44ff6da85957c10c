# Installation state store for oag
import json
import logging
import os
from pathlib import Path
from typing import Any

from oag.models import InstalledItem, StateFile, ToolState
from oag.utils.fs import ensure_dir

logger = logging.getLogger(__name__)

# ABOUTME: State lives inside the target project, one file per project
STATE_DIR_NAME = ".oag"
STATE_FILE_NAME = "state.json"


def get_state_path(project_root: Path) -> Path:
    """Return <project_root>/.oag/state.json."""
    return Path(project_root) / STATE_DIR_NAME / STATE_FILE_NAME


def _parse_tool_state(tool: str, data: Any) -> ToolState | None:
    if not isinstance(data, dict) or not isinstance(data.get("items", {}), dict):
        logger.warning(f"Ignoring malformed state for tool '{tool}'")
        return None

    items: dict[str, InstalledItem] = {}
    for asset_id, raw_item in data.get("items", {}).items():
        if not isinstance(raw_item, dict):
            logger.warning(f"Ignoring malformed state item '{asset_id}' for tool '{tool}'")
            continue
        try:
            items[asset_id] = InstalledItem.from_dict(raw_item)
        except ValueError as e:
            logger.warning(f"Ignoring malformed state item '{asset_id}' for tool '{tool}': {e}")
    return ToolState(items=items)


def load_state(project_root: Path) -> StateFile:
    """Load the project's installation state.

    ABOUTME: Never raises for a missing or malformed file - returns empty state
    ABOUTME: Structurally invalid tool entries are dropped with a warning

    Args:
        project_root: Root of the target project

    Returns:
        Parsed StateFile (possibly empty)
    """
    state_path = get_state_path(project_root)
    if not state_path.exists():
        return StateFile()

    try:
        with open(state_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable state file {state_path}: {e}")
        return StateFile()

    if not isinstance(data, dict) or not isinstance(data.get("tools"), dict):
        logger.warning(f"Ignoring state file without a 'tools' object: {state_path}")
        return StateFile()

    tools: dict[str, ToolState] = {}
    for tool, tool_data in data["tools"].items():
        tool_state = _parse_tool_state(tool, tool_data)
        if tool_state is not None:
            tools[tool] = tool_state
    return StateFile(tools=tools)


def save_state(project_root: Path, state: StateFile) -> Path:
    """Persist the whole state structure.

    ABOUTME: Creates .oag/ if needed
    ABOUTME: Writes a sibling temp file and renames it over the old state

    Returns:
        Path of the written state file
    """
    state_path = get_state_path(project_root)
    ensure_dir(state_path.parent)

    tmp_path = state_path.with_name(state_path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(state.to_dict(), f, indent=2)
        f.write("\n")
    os.replace(tmp_path, state_path)

    logger.debug(f"Saved state to {state_path}")
    return state_path
