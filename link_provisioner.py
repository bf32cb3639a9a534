"""Expose a shared ``node_modules`` folder to the injected extensions."""
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Protocol, Sequence

from file_ops import copy_tree, remove_tree, resolve_first
from launch_utils import log_launch_event, report_error

DEPENDENCY_FOLDER = "node_modules"


class LinkCreator(Protocol):
    def create(self, source: Path, dest: Path) -> None:
        ...


class SymlinkCreator:
    def create(self, source: Path, dest: Path) -> None:
        if os.path.lexists(dest):
            remove_tree(dest)
        os.symlink(source, dest, target_is_directory=True)


class JunctionCreator:
    """Directory junction via ``mklink /J``; needs no elevated rights on Windows."""

    def create(self, source: Path, dest: Path) -> None:
        if os.path.lexists(dest):
            # rmdir drops a junction without touching its target.
            os.rmdir(dest)
        completed = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(dest), str(source)],
            capture_output=True,
            text=True,
        )
        if completed.returncode != 0:
            raise OSError(completed.stderr.strip() or f"mklink exited with {completed.returncode}")


class CopyCreator:
    """Fallback for filesystems without links: a plain copy of the folder."""

    def create(self, source: Path, dest: Path) -> None:
        if os.path.lexists(dest):
            remove_tree(dest)
        copy_tree(source, dest, True)


def select_link_creator(mode: str = "auto", platform: Optional[str] = None) -> LinkCreator:
    platform = platform or sys.platform
    if mode == "copy":
        return CopyCreator()
    if mode == "junction" or (mode == "auto" and platform.startswith("win")):
        return JunctionCreator()
    return SymlinkCreator()


def provision_dependency_link(
    xpui_dir: Path,
    search_dirs: Sequence[Path],
    creator: LinkCreator,
) -> Optional[Path]:
    """Link the first ``node_modules`` found into ``xpui``.

    Returns the linked destination, or None when there is no dependency folder
    or the link could not be created (the latter is reported, not raised).
    """
    source = resolve_first(DEPENDENCY_FOLDER, *search_dirs)
    if source is None or not source.is_dir():
        return None

    dest = Path(xpui_dir) / DEPENDENCY_FOLDER
    try:
        creator.create(source.resolve(), dest)
    except OSError as exc:
        report_error("link_provisioner", f"Cannot create {DEPENDENCY_FOLDER} symlink: {exc}", {"source": str(source)})
        return None
    log_launch_event("link_provisioner", "linked", {"source": str(source), "dest": str(dest)})
    return dest
