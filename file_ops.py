"""Filesystem helpers shared by the injection steps."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Optional

CopyFilter = Callable[[Path], bool]


def copy_tree(src: Path, dest: Path, overwrite: bool = True, keep: Optional[CopyFilter] = None) -> None:
    """Recursively copy ``src`` into ``dest``.

    Existing files are replaced when ``overwrite`` is set and left alone
    otherwise. ``keep`` receives each source path and may return False to skip
    it (a skipped directory skips its whole subtree).
    """
    src = Path(src)
    dest = Path(dest)
    if not src.is_dir():
        raise FileNotFoundError(f"Source folder not found: {src}")
    dest.mkdir(parents=True, exist_ok=True)
    for item in src.iterdir():
        if keep is not None and not keep(item):
            continue
        target = dest / item.name
        if item.is_dir():
            copy_tree(item, target, overwrite, keep)
        elif overwrite or not target.exists():
            shutil.copy2(item, target)


def copy_file(src: Path, dest_dir: Path) -> Path:
    """Copy ``src`` into ``dest_dir`` keeping its file name."""
    src = Path(src)
    dest_dir = Path(dest_dir)
    if not src.is_file():
        raise FileNotFoundError(f"File not found: {src}")
    dest_dir.mkdir(parents=True, exist_ok=True)
    target = dest_dir / src.name
    shutil.copy2(src, target)
    return target


def read_text(path: Path) -> str:
    # Byte-preserving: no newline translation.
    return Path(path).read_bytes().decode("utf-8")


def write_text(path: Path, content: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))


def modify_file(path: Path, transform: Callable[[str], str]) -> None:
    content = read_text(path)
    updated = transform(content)
    if updated != content:
        write_text(path, updated)


def remove_tree(path: Path) -> None:
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def resolve_first(name: str, *folders: Path) -> Optional[Path]:
    """Return ``folder / name`` for the first folder where it exists.

    Links are followed, so a dangling link does not count as a match.
    """
    for folder in folders:
        candidate = Path(folder) / name
        if candidate.exists():
            return candidate
    return None
