"""Copy extension scripts into xpui and apply their symbol-map directives."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from file_ops import copy_file, modify_file, resolve_first
from launch_utils import log_launch_event, report_error

MODULE_SCRIPT_SUFFIX = ".mjs"
SYMBOL_MAP_RE = re.compile(r"//\s*spicetify_map\{(.+?)\}\{(.+?)\}")


@dataclass(slots=True)
class ExtensionDescriptor:
    name: str
    source: Path
    is_module_script: bool


@dataclass(slots=True)
class SymbolMapping:
    line_index: int
    search: str
    replace: str


@dataclass(slots=True)
class InjectionResult:
    installed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def resolve_extension(name: str, search_dirs: Sequence[Path]) -> Optional[ExtensionDescriptor]:
    path = Path(name)
    if path.is_absolute():
        display = path.name
        source: Optional[Path] = path
    else:
        display = name
        source = resolve_first(name, *search_dirs)
    if source is None:
        return None
    return ExtensionDescriptor(display, source, display.endswith(MODULE_SCRIPT_SUFFIX))


def find_symbol_mappings(lines: Sequence[str]) -> List[SymbolMapping]:
    """Pass one: every directive line paired with the index of the line it rewrites.

    A directive on the final line has nothing to rewrite and is dropped.
    """
    mappings: List[SymbolMapping] = []
    for index, line in enumerate(lines):
        match = SYMBOL_MAP_RE.search(line)
        if match is None or index + 1 >= len(lines):
            continue
        mappings.append(SymbolMapping(index + 1, match.group(1), match.group(2)))
    return mappings


def apply_symbol_mappings(lines: Sequence[str], mappings: Iterable[SymbolMapping]) -> List[str]:
    """Pass two: replace the first occurrence of each search token on its target line."""
    updated = list(lines)
    for mapping in mappings:
        updated[mapping.line_index] = updated[mapping.line_index].replace(mapping.search, mapping.replace, 1)
    return updated


def remap_symbols(content: str) -> str:
    lines = content.split("\n")
    mappings = find_symbol_mappings(lines)
    if not mappings:
        return content
    return "\n".join(apply_symbol_mappings(lines, mappings))


def push_extensions(names: Iterable[str], dest: Path, search_dirs: Sequence[Path]) -> InjectionResult:
    result = InjectionResult()
    for name in names:
        descriptor = resolve_extension(name, search_dirs)
        if descriptor is None:
            message = f'Extension "{name}" not found.'
            report_error("extension_injector", message, {"extension": name})
            result.errors.append(message)
            continue

        try:
            target = copy_file(descriptor.source, dest)
        except OSError as exc:
            message = f'Cannot copy extension "{descriptor.name}": {exc}'
            report_error("extension_injector", message, {"extension": descriptor.name})
            result.errors.append(message)
            continue

        if descriptor.is_module_script:
            try:
                modify_file(target, remap_symbols)
            except (OSError, UnicodeDecodeError) as exc:
                message = f'Cannot remap symbols in "{descriptor.name}": {exc}'
                report_error("extension_injector", message, {"extension": descriptor.name})
                result.errors.append(message)
                continue

        result.installed.append(descriptor.name)
        log_launch_event("extension_injector", "installed", {"extension": descriptor.name})
    return result
