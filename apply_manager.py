"""CLI utility to apply themes, extensions and custom apps to the client."""
from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from app_bundler import push_apps
from apply_config import ApplyConfig, load_config
from asset_installer import AssetMode, install_assets, install_theme_assets
from extension_injector import push_extensions
from host_status import get_backup_status, get_host_status, is_initialized
from html_hooks import register_entries
from launch_utils import (
    AskFunc,
    ApplyAborted,
    get_local_version,
    log_launch_event,
    print_error,
    print_info,
    print_ok,
    print_step,
    print_success,
    read_answer,
)
from link_provisioner import LinkCreator, provision_dependency_link, select_link_creator
from style_injector import inject_user_css
from version_gate import check_states


@dataclass(slots=True)
class ApplyReport:
    asset_steps: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    custom_apps: List[str] = field(default_factory=list)
    linked: Optional[Path] = None
    errors: List[str] = field(default_factory=list)


def _update_css(config: ApplyConfig) -> None:
    print_step("Transferring user.css:")
    inject_user_css(config.xpui_dir, config.user_css_source, config.color_scheme)
    print_ok()


def _update_assets(config: ApplyConfig) -> None:
    print_step("Overwriting custom assets:")
    if install_theme_assets(config.xpui_dir, config.theme_folder):
        print_ok()
    else:
        print_info("Theme has no assets folder.")


def _push_extensions(config: ApplyConfig, report: ApplyReport) -> None:
    print_step("Transferring extensions:")
    result = push_extensions(config.extensions, config.xpui_dir, config.extension_dirs)
    report.extensions.extend(result.installed)
    report.errors.extend(result.errors)
    print_ok()


def apply(
    config: ApplyConfig,
    ask: AskFunc = read_answer,
    link_creator: Optional[LinkCreator] = None,
) -> ApplyReport:
    """Run the whole pipeline; fatal problems raise :class:`ApplyAborted`."""
    check_states(config, ask)
    log_launch_event("apply_manager", "apply-start", {"dest": str(config.app_dest_path)})
    report = ApplyReport()

    mode = AssetMode.from_flag(config.replace_colors)
    print_step(f"Copying {mode.value} assets:")
    report.asset_steps = install_assets(
        config.app_dest_path,
        config.raw_folder,
        config.themed_folder,
        mode,
        is_initialized(config.app_dest_path),
    )
    print_ok()

    _update_css(config)
    if config.overwrite_assets:
        _update_assets(config)

    print_step("Applying additional modifications:")
    if register_entries(config.xpui_dir, config.extensions, config.custom_apps):
        print_ok()

    if config.extensions:
        _push_extensions(config, report)
        creator = link_creator or select_link_creator(config.link_mode)
        report.linked = provision_dependency_link(config.xpui_dir, config.extension_dirs, creator)
        if report.linked is not None:
            print_info(f"Linked node_modules into {report.linked.parent}")

    if config.custom_apps:
        print_step("Transferring custom apps:")
        result = push_apps(config.custom_apps, config.xpui_dir, config.app_dirs)
        report.custom_apps.extend(result.installed)
        report.errors.extend(result.errors)
        print_ok()

    log_launch_event(
        "apply_manager",
        "apply-finished",
        {"extensions": report.extensions, "custom_apps": report.custom_apps, "errors": len(report.errors)},
    )
    print_success("Client is spiced up!")
    return report


def update_theme(config: ApplyConfig, ask: AskFunc = read_answer) -> None:
    check_states(config, ask)
    if config.theme_folder is None:
        raise ApplyAborted('Nothing is updated: config "current_theme" is blank.')
    _update_css(config)
    if config.overwrite_assets:
        _update_assets(config)
    log_launch_event("apply_manager", "theme-updated", {"theme": str(config.theme_folder)})
    print_success("Custom CSS is updated")


def update_all_extensions(config: ApplyConfig, ask: AskFunc = read_answer) -> ApplyReport:
    check_states(config, ask)
    if not config.extensions:
        raise ApplyAborted("No extension to update.")
    report = ApplyReport()
    _push_extensions(config, report)
    print_success(time.strftime("%H:%M:%S") + " All extensions are updated.")
    return report


def show_status(config: ApplyConfig) -> int:
    backup = get_backup_status(config.prefs_path, config.backup_folder, config.backup_version)
    host = get_host_status(config.app_path)
    print(f"Backup: {backup.state.value} (recorded {backup.backup_version or '-'}, client {backup.client_version or '-'})")
    print(f"Client: {host.state.value}")
    print(f"Destination initialized: {'yes' if is_initialized(config.app_dest_path) else 'no'}")
    return 0


def _run_apply(args: argparse.Namespace) -> int:
    apply(load_config(args.config))
    return 0


def _run_update_theme(args: argparse.Namespace) -> int:
    update_theme(load_config(args.config))
    return 0


def _run_update_extensions(args: argparse.Namespace) -> int:
    update_all_extensions(load_config(args.config))
    return 0


def _run_status(args: argparse.Namespace) -> int:
    return show_status(load_config(args.config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inject themes, extensions and custom apps into the client.")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("--version", action="version", version=get_local_version())
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("apply", help="Apply the full customization").set_defaults(func=_run_apply)
    subparsers.add_parser("update-theme", help="Refresh user.css and theme assets").set_defaults(
        func=_run_update_theme
    )
    subparsers.add_parser("update-extensions", help="Push all configured extensions again").set_defaults(
        func=_run_update_extensions
    )
    subparsers.add_parser("status", help="Show backup and client state").set_defaults(func=_run_status)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    args = parser.parse_args(argv)
    log_launch_event("apply_manager", "cli-command", {"command": args.command})
    try:
        return args.func(args)
    except ApplyAborted as exc:
        print_error(str(exc))
        log_launch_event("apply_manager", "aborted", {"command": args.command, "error": str(exc)})
        return exc.exit_code


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as exc:
        error_path = Path(__file__).with_name("apply_manager_error.log")
        try:
            with error_path.open("a", encoding="utf-8") as handle:
                handle.write("\n=== Unhandled exception ===\n")
                handle.write(time.strftime("%Y-%m-%d %H:%M:%S"))
                handle.write("\n")
                json.dump({"error": str(exc)}, handle)
                handle.write("\n")
        except Exception:
            pass
        log_launch_event("apply_manager", "unhandled-exception", {"error": str(exc)})
        raise
