from __future__ import annotations

import pytest

from host_status import (
    BackupState,
    HostState,
    HostStatus,
    classify_folder,
    get_backup_status,
    get_host_status,
    is_initialized,
    read_client_version,
)
from launch_utils import ApplyAborted


def test_backup_is_empty_without_recorded_version(client) -> None:
    status = get_backup_status(client["prefs"], client["backup"], "")
    assert status.is_empty()


def test_backup_is_empty_without_archives(client, tmp_path) -> None:
    empty = tmp_path / "empty_backup"
    empty.mkdir()
    status = get_backup_status(client["prefs"], empty, "1.2.3")
    assert status.state is BackupState.EMPTY


def test_backup_current_and_outdated(client) -> None:
    assert get_backup_status(client["prefs"], client["backup"], "1.2.3").state is BackupState.CURRENT
    outdated = get_backup_status(client["prefs"], client["backup"], "1.0.0")
    assert outdated.is_outdated()
    assert outdated.client_version == "1.2.3"


def test_unreadable_prefs_is_fatal(client, tmp_path) -> None:
    with pytest.raises(ApplyAborted):
        read_client_version(tmp_path / "missing-prefs")


def test_classify_folder_states(tmp_path) -> None:
    stock = tmp_path / "stock"
    stock.mkdir()
    (stock / "a.spa").write_bytes(b"")
    assert classify_folder(stock) is HostState.STOCK

    modified = tmp_path / "modified"
    (modified / "xpui").mkdir(parents=True)
    assert classify_folder(modified) is HostState.MODIFIED

    mixed = tmp_path / "mixed"
    (mixed / "xpui").mkdir(parents=True)
    (mixed / "login.spa").write_bytes(b"")
    assert classify_folder(mixed) is HostState.MIXED

    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "notes.txt").write_text("?", encoding="utf-8")
    assert classify_folder(broken) is HostState.UNBACKABLE

    store = tmp_path / "WindowsApps" / "Apps"
    store.mkdir(parents=True)
    (store / "a.spa").write_bytes(b"")
    assert classify_folder(store) is HostState.RESTRICTED


def test_host_status_requires_folder(tmp_path) -> None:
    with pytest.raises(ApplyAborted):
        get_host_status(tmp_path / "nowhere")


def test_is_initialized(client, tmp_path) -> None:
    assert not is_initialized(client["apps"])
    assert not is_initialized(tmp_path / "nowhere")
    assert is_initialized(client["raw"])


def test_host_status_predicates() -> None:
    assert HostStatus(HostState.MODIFIED).is_applied()
    assert not HostStatus(HostState.MIXED).is_applied()
    assert HostStatus(HostState.STOCK).is_backupable()
    assert not HostStatus(HostState.RESTRICTED).is_backupable()
