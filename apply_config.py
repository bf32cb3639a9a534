"""Configuration value object for an apply run.

The JSON file is read once per invocation and turned into an immutable
:class:`ApplyConfig`; every component receives it (or the fields it needs)
explicitly. Missing or malformed values fall back to defaults instead of
failing.
"""
from __future__ import annotations

import configparser
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from launch_utils import BASE_DIR

DEFAULT_CONFIG_FILE = BASE_DIR / "config.json"
BUNDLED_EXTENSIONS_DIR = BASE_DIR / "Extensions"
BUNDLED_APPS_DIR = BASE_DIR / "CustomApps"
LINK_MODES = ("auto", "symlink", "junction", "copy")


def _clean_str(value: object) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        if value:
            return value
    return None


def _as_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def _as_list(value: object) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split("|")
    elif isinstance(value, list):
        items = [item for item in value if isinstance(item, str)]
    else:
        return ()
    return tuple(item.strip() for item in items if item.strip())


def _section(data: Dict[str, object], name: str) -> Dict[str, object]:
    section = data.get(name)
    if isinstance(section, dict):
        return section
    return {}


def _load_json(path: Path) -> Dict[str, object]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if isinstance(data, dict):
            return data
    except Exception:
        return {}
    return {}


@dataclass(frozen=True)
class ApplyConfig:
    app_path: Path
    app_dest_path: Path
    prefs_path: Path
    backup_folder: Path
    raw_folder: Path
    themed_folder: Path
    user_extensions_dir: Path
    user_apps_dir: Path
    bundled_extensions_dir: Path = BUNDLED_EXTENSIONS_DIR
    bundled_apps_dir: Path = BUNDLED_APPS_DIR
    theme_folder: Optional[Path] = None
    backup_version: str = ""
    inject_css: bool = True
    replace_colors: bool = True
    overwrite_assets: bool = False
    link_mode: str = "auto"
    extensions: Tuple[str, ...] = ()
    custom_apps: Tuple[str, ...] = ()
    color_scheme: Optional[Dict[str, str]] = field(default=None, compare=False)

    @property
    def xpui_dir(self) -> Path:
        return self.app_dest_path / "xpui"

    @property
    def extension_dirs(self) -> List[Path]:
        """User folder first, bundled folder second."""
        return [self.user_extensions_dir, self.bundled_extensions_dir]

    @property
    def app_dirs(self) -> List[Path]:
        return [self.user_apps_dir, self.bundled_apps_dir]

    @property
    def user_css_source(self) -> Optional[Path]:
        if self.theme_folder is None or not self.inject_css:
            return None
        return self.theme_folder / "user.css"


def load_color_scheme(theme_folder: Optional[Path], scheme_name: Optional[str]) -> Optional[Dict[str, str]]:
    """Read one section of ``<theme>/color.ini``; None when there is nothing to apply."""
    if theme_folder is None:
        return None
    color_file = theme_folder / "color.ini"
    if not color_file.is_file():
        return None
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # type: ignore[assignment]
    try:
        parser.read(color_file, encoding="utf-8")
    except configparser.Error:
        return None
    sections = parser.sections()
    if not sections:
        return None
    name = scheme_name if scheme_name in sections else sections[0]
    scheme: Dict[str, str] = {}
    for key, value in parser.items(name):
        cleaned = value.split(";", 1)[0].strip()
        if cleaned:
            scheme[key.strip()] = cleaned
    return scheme or None


def load_config(path: Optional[Path] = None) -> ApplyConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_FILE
    base = config_path.resolve().parent
    data = _load_json(config_path)
    paths = _section(data, "paths")
    backup = _section(data, "backup")
    settings = _section(data, "settings")
    features = _section(data, "features")

    def path_value(key: str, default: Path) -> Path:
        raw = _clean_str(paths.get(key))
        if raw is None:
            return default
        candidate = Path(raw).expanduser()
        return candidate if candidate.is_absolute() else base / candidate

    app_path = path_value("app_path", base / "client" / "Apps")
    backup_folder = path_value("backup_folder", base / "Backup")
    extracted = path_value("extracted_folder", base / "Extracted")
    themes_dir = path_value("themes", base / "Themes")

    theme_name = _clean_str(settings.get("current_theme"))
    theme_folder: Optional[Path] = None
    if theme_name:
        theme_folder = Path(theme_name) if Path(theme_name).is_absolute() else themes_dir / theme_name

    link_mode = _clean_str(settings.get("link_mode")) or "auto"
    if link_mode not in LINK_MODES:
        link_mode = "auto"

    return ApplyConfig(
        app_path=app_path,
        app_dest_path=path_value("app_dest_path", app_path),
        prefs_path=path_value("prefs_path", base / "client" / "prefs"),
        backup_folder=backup_folder,
        raw_folder=path_value("raw_folder", extracted / "Raw"),
        themed_folder=path_value("themed_folder", extracted / "Themed"),
        user_extensions_dir=path_value("user_extensions", base / "Extensions"),
        user_apps_dir=path_value("user_apps", base / "CustomApps"),
        bundled_extensions_dir=path_value("bundled_extensions", BUNDLED_EXTENSIONS_DIR),
        bundled_apps_dir=path_value("bundled_apps", BUNDLED_APPS_DIR),
        theme_folder=theme_folder,
        backup_version=_clean_str(backup.get("version")) or "",
        inject_css=_as_bool(settings.get("inject_css"), True),
        replace_colors=_as_bool(settings.get("replace_colors"), True),
        overwrite_assets=_as_bool(settings.get("overwrite_assets"), False),
        link_mode=link_mode,
        extensions=_as_list(features.get("extensions")),
        custom_apps=_as_list(features.get("custom_apps")),
        color_scheme=load_color_scheme(theme_folder, _clean_str(settings.get("color_scheme"))),
    )
