"""Per-repository configuration read from `.retcon/config.toml`."""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".retcon"
CONFIG_FILE_NAME = "config.toml"


@dataclass(frozen=True)
class RetconConfig:
    """Settings for the rewrite engine.

    Example config.toml:
      # Backup branches are named <branch>-<backup_prefix>-<epoch-ms>
      backup_prefix = "backup"

      # Fetch the upstream remote before listing unpushed commits
      fetch_before_scan = true

      # An author-date-only edit also sets the commit date to the same value
      sync_commit_timestamp = true
    """

    backup_prefix: str = "backup"
    fetch_before_scan: bool = True
    sync_commit_timestamp: bool = True


def config_path(repo_root: Path) -> Path:
    return repo_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(repo_root: Path) -> RetconConfig:
    """Load config.toml for a repository if present; otherwise return defaults.

    Unknown keys are ignored.

    Raises:
        ValueError: If a known key has the wrong type or the backup prefix is unusable
    """
    cfg_path = config_path(repo_root)
    if not cfg_path.exists():
        return RetconConfig()

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    defaults = RetconConfig()

    backup_prefix = data.get("backup_prefix", defaults.backup_prefix)
    if not isinstance(backup_prefix, str) or not backup_prefix.strip():
        raise ValueError(f"{cfg_path}: backup_prefix must be a non-empty string")
    if any(ch.isspace() or ch in "~^:?*[\\" for ch in backup_prefix):
        raise ValueError(
            f"{cfg_path}: backup_prefix {backup_prefix!r} is not a valid ref component"
        )

    fetch_before_scan = data.get("fetch_before_scan", defaults.fetch_before_scan)
    if not isinstance(fetch_before_scan, bool):
        raise ValueError(f"{cfg_path}: fetch_before_scan must be true or false")

    sync_commit_timestamp = data.get("sync_commit_timestamp", defaults.sync_commit_timestamp)
    if not isinstance(sync_commit_timestamp, bool):
        raise ValueError(f"{cfg_path}: sync_commit_timestamp must be true or false")

    unknown = sorted(set(data) - {"backup_prefix", "fetch_before_scan", "sync_commit_timestamp"})
    if unknown:
        logger.debug("Ignoring unknown config keys in %s: %s", cfg_path, ", ".join(unknown))

    return RetconConfig(
        backup_prefix=backup_prefix,
        fetch_before_scan=fetch_before_scan,
        sync_commit_timestamp=sync_commit_timestamp,
    )
