# ABOUTME: Filesystem helpers shared by the installers and state store.
# ABOUTME: Existence checks never follow symlinks so dangling links still count as present.
import errno
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def path_exists(path: Path) -> bool:
    """Return True if anything (including a dangling symlink) is at path."""
    try:
        path.lstat()
    except FileNotFoundError:
        return False
    return True


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_inside(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True


def prune_empty_dirs(start_dir: Path | None, stop_dir: Path | None) -> list[Path]:
    """Remove empty directories from start_dir upwards, stopping before stop_dir.

    ABOUTME: stop_dir itself is never removed, nor anything above it
    ABOUTME: No-op when start_dir is not inside stop_dir
    ABOUTME: Stops at the first non-empty, missing or non-directory entry

    Args:
        start_dir: Directory to start from (typically a removed file's parent)
        stop_dir: Exclusive upper boundary

    Returns:
        Directories that were removed, deepest first

    Examples:
        >>> prune_empty_dirs(root / ".claude/skills/foo/sub", root / ".claude/skills")
        [PosixPath('.../.claude/skills/foo/sub'), PosixPath('.../.claude/skills/foo')]
    """
    removed: list[Path] = []
    if start_dir is None or stop_dir is None:
        return removed

    current = Path(os.path.abspath(start_dir))
    stop = Path(os.path.abspath(stop_dir))
    if not _is_inside(current, stop):
        return removed

    while current != stop:
        try:
            if current.is_symlink() or not current.is_dir():
                break
            if any(current.iterdir()):
                break
            current.rmdir()
        except FileNotFoundError:
            break
        except OSError as e:
            # Someone wrote into the directory between the check and rmdir
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                break
            raise

        logger.debug(f"Pruned empty directory: {current}")
        removed.append(current)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return removed
