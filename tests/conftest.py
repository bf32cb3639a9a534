from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

import launch_utils  # noqa: E402
from apply_config import ApplyConfig  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_diagnostics(tmp_path, monkeypatch):
    monkeypatch.setattr(launch_utils, "LAUNCH_LOG_PATH", tmp_path / "diagnostics.jsonl")


@pytest.fixture
def client(tmp_path) -> dict:
    """A stock client with a current backup and extracted raw/themed trees."""
    apps = tmp_path / "Apps"
    apps.mkdir()
    (apps / "xpui.spa").write_bytes(b"stock")
    (apps / "login.spa").write_bytes(b"stock")

    backup = tmp_path / "Backup"
    backup.mkdir()
    (backup / "xpui.spa").write_bytes(b"stock")

    prefs = tmp_path / "prefs"
    prefs.write_text('app.last-launched-version="1.2.3"\n', encoding="utf-8")

    raw = tmp_path / "Extracted" / "Raw"
    (raw / "xpui").mkdir(parents=True)
    (raw / "xpui" / "index.html").write_text("<html><body>raw</body></html>", encoding="utf-8")
    (raw / "xpui" / "xpui.js").write_text("raw js", encoding="utf-8")
    (raw / "login").mkdir()
    (raw / "login" / "index.html").write_text("login", encoding="utf-8")

    themed = tmp_path / "Extracted" / "Themed"
    (themed / "xpui").mkdir(parents=True)
    (themed / "xpui" / "xpui.js").write_text("themed js", encoding="utf-8")

    user_ext = tmp_path / "user" / "Extensions"
    user_ext.mkdir(parents=True)
    bundled_ext = tmp_path / "bundled" / "Extensions"
    bundled_ext.mkdir(parents=True)
    user_apps = tmp_path / "user" / "CustomApps"
    user_apps.mkdir(parents=True)
    bundled_apps = tmp_path / "bundled" / "CustomApps"
    bundled_apps.mkdir(parents=True)

    return {
        "root": tmp_path,
        "apps": apps,
        "backup": backup,
        "prefs": prefs,
        "raw": raw,
        "themed": themed,
        "user_ext": user_ext,
        "bundled_ext": bundled_ext,
        "user_apps": user_apps,
        "bundled_apps": bundled_apps,
    }


@pytest.fixture
def make_config(client):
    def _make(**overrides) -> ApplyConfig:
        values = {
            "app_path": client["apps"],
            "app_dest_path": client["apps"],
            "prefs_path": client["prefs"],
            "backup_folder": client["backup"],
            "raw_folder": client["raw"],
            "themed_folder": client["themed"],
            "user_extensions_dir": client["user_ext"],
            "user_apps_dir": client["user_apps"],
            "bundled_extensions_dir": client["bundled_ext"],
            "bundled_apps_dir": client["bundled_apps"],
            "backup_version": "1.2.3",
            "replace_colors": False,
        }
        values.update(overrides)
        return ApplyConfig(**values)

    return _make
