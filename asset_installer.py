"""Materialise the raw or themed asset tree in the client's apps folder."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from file_ops import copy_tree, remove_tree
from launch_utils import ApplyAborted, log_launch_event

TreeCopier = Callable[[Path, Path, bool, Optional[Callable[[Path], bool]]], None]


class AssetMode(Enum):
    RAW = "raw"
    THEMED = "themed"

    @classmethod
    def from_flag(cls, replace_colors: bool) -> "AssetMode":
        return cls.THEMED if replace_colors else cls.RAW


def _copy(copier: TreeCopier, src: Path, dest: Path, label: str) -> None:
    try:
        copier(src, dest, True, None)
    except OSError as exc:
        log_launch_event("asset_installer", "copy-failed", {"source": str(src), "error": str(exc)})
        raise ApplyAborted(f"Cannot copy {label} assets from {src}: {exc}") from exc


def install_assets(
    dest: Path,
    raw_folder: Path,
    themed_folder: Path,
    mode: AssetMode,
    initialized: bool,
    copier: TreeCopier = copy_tree,
) -> List[str]:
    """Overwrite ``dest`` with the raw or themed tree and return the steps taken.

    An uninitialised destination is wiped and filled from the raw tree first so
    no stock file survives; themed assets are only ever overlaid on a raw tree.
    """
    steps: List[str] = []
    extracted_raw = False
    if not initialized:
        try:
            remove_tree(dest)
        except OSError as exc:
            raise ApplyAborted(f"Cannot clear {dest}: {exc}") from exc
        _copy(copier, raw_folder, dest, "raw")
        steps.append("raw")
        extracted_raw = True

    if mode is AssetMode.THEMED:
        _copy(copier, themed_folder, dest, "themed")
        steps.append("themed")
    elif not extracted_raw:
        _copy(copier, raw_folder, dest, "raw")
        steps.append("raw")

    log_launch_event("asset_installer", "installed", {"mode": mode.value, "steps": steps})
    return steps


def install_theme_assets(xpui_dir: Path, theme_folder: Optional[Path]) -> bool:
    """Copy ``<theme>/assets`` over ``<xpui>/assets``; False when the theme has none."""
    if theme_folder is None:
        return False
    source = Path(theme_folder) / "assets"
    if not source.is_dir():
        return False
    try:
        copy_tree(source, Path(xpui_dir) / "assets", True)
    except OSError as exc:
        raise ApplyAborted(f"Cannot copy theme assets from {source}: {exc}") from exc
    return True
