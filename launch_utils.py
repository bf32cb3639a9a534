"""Shared helpers for apply diagnostics, console output and prompts."""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path
from typing import Callable, Dict, Optional

BASE_DIR = Path(__file__).resolve().parent
LAUNCH_LOG_PATH = BASE_DIR / "apply_diagnostics.jsonl"
VERSION_FILE = BASE_DIR / "VERSION"

AskFunc = Callable[[str, bool], bool]


class ApplyAborted(RuntimeError):
    """Fatal failure: the run stops and the process exits non-zero."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def log_launch_event(component: str, event: str, details: Optional[Dict[str, object]] = None) -> None:
    """Append a diagnostic event so debug tools can explain failed runs."""
    entry = {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S"),
        "component": component,
        "event": event,
        "details": details or {},
    }
    try:
        with LAUNCH_LOG_PATH.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False))
            handle.write("\n")
    except Exception:
        pass


def get_local_version() -> str:
    """Return the version string stored in VERSION."""
    try:
        text = VERSION_FILE.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return "0.0.0"
    return text or "0.0.0"


def print_step(message: str) -> None:
    print(message)


def print_ok() -> None:
    print("OK")


def print_success(message: str) -> None:
    print(f"Success: {message}")


def print_info(message: str) -> None:
    print(f"Info: {message}")


def print_warning(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def print_error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def report_error(component: str, message: str, details: Optional[Dict[str, object]] = None) -> None:
    """Print a non-fatal error and record it in the diagnostics log."""
    print_error(message)
    payload: Dict[str, object] = {"message": message}
    if details:
        payload.update(details)
    log_launch_event(component, "item-error", payload)


def read_answer(prompt: str, default: bool = False) -> bool:
    """Block on a yes/no question; an empty answer or closed stdin yields ``default``."""
    try:
        answer = input(prompt).strip().lower()
    except EOFError:
        answer = ""
    if not answer:
        return default
    if answer in {"y", "yes"}:
        return True
    if answer in {"n", "no"}:
        return False
    return default
