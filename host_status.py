"""Probes for the backup state and the on-disk state of the client."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from launch_utils import ApplyAborted

ARCHIVE_SUFFIX = ".spa"
RESTRICTED_DIR_NAME = "windowsapps"
PREFS_VERSION_RE = re.compile(r'^\s*app\.last-launched-version\s*=\s*"?([^"\r\n]+)"?', re.MULTILINE)


class BackupState(Enum):
    EMPTY = "empty"
    CURRENT = "current"
    OUTDATED = "outdated"


class HostState(Enum):
    STOCK = "stock"
    MODIFIED = "modified"
    MIXED = "mixed"
    UNBACKABLE = "unbackable"
    RESTRICTED = "restricted"


@dataclass(slots=True)
class BackupStatus:
    state: BackupState
    backup_version: str = ""
    client_version: str = ""

    def is_empty(self) -> bool:
        return self.state is BackupState.EMPTY

    def is_outdated(self) -> bool:
        return self.state is BackupState.OUTDATED


@dataclass(slots=True)
class HostStatus:
    state: HostState

    def is_applied(self) -> bool:
        return self.state is HostState.MODIFIED

    def is_backupable(self) -> bool:
        return self.state is HostState.STOCK

    def is_mixed(self) -> bool:
        return self.state is HostState.MIXED

    def is_stock(self) -> bool:
        return self.state is HostState.STOCK


def read_client_version(prefs_path: Path) -> str:
    try:
        text = Path(prefs_path).read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise ApplyAborted(f"Cannot read client prefs file {prefs_path}: {exc}") from exc
    match = PREFS_VERSION_RE.search(text)
    return match.group(1).strip() if match else ""


def _has_archives(folder: Path) -> bool:
    if not folder.is_dir():
        return False
    return any(entry.is_file() and entry.name.endswith(ARCHIVE_SUFFIX) for entry in folder.iterdir())


def get_backup_status(prefs_path: Path, backup_folder: Path, recorded_version: str) -> BackupStatus:
    recorded = (recorded_version or "").strip()
    if not recorded or not _has_archives(Path(backup_folder)):
        return BackupStatus(BackupState.EMPTY, recorded)
    client_version = read_client_version(prefs_path)
    if client_version != recorded:
        return BackupStatus(BackupState.OUTDATED, recorded, client_version)
    return BackupStatus(BackupState.CURRENT, recorded, client_version)


def classify_folder(folder: Path) -> HostState:
    """Classify an apps folder by its archives (stock) and extracted folders (modified)."""
    if any(part.lower() == RESTRICTED_DIR_NAME for part in Path(folder).parts):
        return HostState.RESTRICTED
    entries = list(Path(folder).iterdir())
    if not entries:
        return HostState.UNBACKABLE
    archives = sum(1 for entry in entries if entry.is_file() and entry.name.endswith(ARCHIVE_SUFFIX))
    folders = sum(1 for entry in entries if entry.is_dir())
    if archives == len(entries):
        return HostState.STOCK
    if folders == len(entries):
        return HostState.MODIFIED
    if archives and folders:
        return HostState.MIXED
    return HostState.UNBACKABLE


def get_host_status(apps_path: Path) -> HostStatus:
    path = Path(apps_path)
    if not path.is_dir():
        raise ApplyAborted(f"Cannot read client state: {path} is not a folder")
    return HostStatus(classify_folder(path))


def is_initialized(dest: Path) -> bool:
    """True when ``dest`` already holds a fully extracted asset tree."""
    path = Path(dest)
    if not path.is_dir():
        return False
    return HostStatus(classify_folder(path)).is_applied()
