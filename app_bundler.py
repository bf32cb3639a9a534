"""Bundle custom apps into module chunks the client's loader can register.

Each app folder needs an ``index.js`` entry; ``manifest.json`` may list extra
``subfiles`` appended in order and ``style.css`` supplies the stylesheet. Three
files are written per app: ``<id>.json`` (the manifest, verbatim), ``<id>.js``
(the wrapped script) and ``<id>.css``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Iterable, List, Optional, Sequence, Tuple

from file_ops import read_text, resolve_first, write_text
from launch_utils import log_launch_event, report_error

APP_ID_PREFIX = "spicetify-routes-"
ENTRY_FILE = "index.js"
MANIFEST_FILE = "manifest.json"
STYLE_FILE = "style.css"

MODULE_CHUNK_TEMPLATE = (
    '(("undefined"!=typeof self?self:global).webpackChunkopen=("undefined"!=typeof self?self:global).webpackChunkopen||[])\n'
    '.push([["%s"],{"%s":(e,t,n)=>{\n'
    '"use strict";n.r(t),n.d(t,{default:()=>render});\n'
    "%s\n"
    "}}]);"
)


@dataclass(frozen=True)
class AppManifest:
    text: str
    subfiles: Tuple[str, ...] = ()

    EMPTY: ClassVar["AppManifest"]

    @classmethod
    def parse(cls, text: str) -> "AppManifest":
        try:
            data = json.loads(text)
        except ValueError:
            return cls.EMPTY
        if not isinstance(data, dict):
            return cls.EMPTY
        raw = data.get("subfiles")
        subfiles: Tuple[str, ...] = ()
        if isinstance(raw, list):
            subfiles = tuple(item for item in raw if isinstance(item, str))
        return cls(text, subfiles)

    @classmethod
    def load(cls, path: Path) -> "AppManifest":
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError):
            return cls.EMPTY
        return cls.parse(text)


AppManifest.EMPTY = AppManifest("{}")


@dataclass(slots=True)
class CustomAppDescriptor:
    name: str
    source_dir: Path
    manifest: AppManifest

    @property
    def app_id(self) -> str:
        return APP_ID_PREFIX + self.name


@dataclass(slots=True)
class BundleResult:
    installed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def app_id_for(name: str) -> str:
    return APP_ID_PREFIX + name


def wrap_module_chunk(app_id: str, script: str) -> str:
    return MODULE_CHUNK_TEMPLATE % (app_id, app_id, script)


def concat_script(entry: str, source_dir: Path, subfiles: Iterable[str]) -> str:
    parts = [entry]
    for subfile in subfiles:
        try:
            parts.append(read_text(source_dir / subfile))
        except (OSError, UnicodeDecodeError):
            continue
    return "\n".join(parts)


def resolve_app(name: str, search_dirs: Sequence[Path]) -> Optional[Path]:
    return resolve_first(name, *search_dirs)


def bundle_app(name: str, source_dir: Path, dest: Path) -> CustomAppDescriptor:
    """Write the bundle triad for one app; raises FileNotFoundError without ``index.js``."""
    entry_path = source_dir / ENTRY_FILE
    try:
        entry = read_text(entry_path)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileNotFoundError(f'Custom app "{name}" does not have {ENTRY_FILE}') from exc

    descriptor = CustomAppDescriptor(name, source_dir, AppManifest.load(source_dir / MANIFEST_FILE))
    app_id = descriptor.app_id
    write_text(dest / f"{app_id}.json", descriptor.manifest.text)

    script = concat_script(entry, source_dir, descriptor.manifest.subfiles)
    write_text(dest / f"{app_id}.js", wrap_module_chunk(app_id, script))

    try:
        css = read_text(source_dir / STYLE_FILE)
    except (OSError, UnicodeDecodeError):
        css = ""
    write_text(dest / f"{app_id}.css", css)
    return descriptor


def push_apps(names: Iterable[str], dest: Path, search_dirs: Sequence[Path]) -> BundleResult:
    result = BundleResult()
    for name in names:
        source_dir = resolve_app(name, search_dirs)
        if source_dir is None or not source_dir.is_dir():
            message = f'Custom app "{name}" not found.'
            report_error("app_bundler", message, {"app": name})
            result.errors.append(message)
            continue
        try:
            bundle_app(name, source_dir, dest)
        except FileNotFoundError as exc:
            message = str(exc)
            report_error("app_bundler", message, {"app": name})
            result.errors.append(message)
            continue
        except OSError as exc:
            message = f'Cannot write custom app "{name}": {exc}'
            report_error("app_bundler", message, {"app": name})
            result.errors.append(message)
            continue
        result.installed.append(name)
        log_launch_event("app_bundler", "installed", {"app": name})
    return result
