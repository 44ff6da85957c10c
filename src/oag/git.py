# Provenance lookup for installed items
import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN_COMMIT = "unknown"
GIT_TIMEOUT = 10  # seconds


def run_git(args: list[str], cwd: Path | None = None) -> str:
    """Run git and return stripped stdout.

    Raises:
        RuntimeError: If git can't be started or exits non-zero
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise RuntimeError(f"Failed to run git: {e}") from e

    if result.returncode != 0:
        message = result.stderr.strip() or f"git {' '.join(args)} failed"
        raise RuntimeError(message)
    return result.stdout.strip()


def get_head_commit(repo_path: Path) -> str:
    return run_git(["rev-parse", "HEAD"], cwd=repo_path)


def safe_get_commit(repo_path: Path | None) -> str:
    """HEAD commit of the registry checkout, or "unknown"."""
    if repo_path is None:
        return UNKNOWN_COMMIT
    try:
        return get_head_commit(repo_path)
    except RuntimeError as e:
        logger.warning(f"Could not read registry commit in {repo_path}: {e}")
        return UNKNOWN_COMMIT
