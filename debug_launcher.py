"""Explain why the last apply run stopped or which items it skipped."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, List, Optional

import launch_utils

ERROR_LOG = Path(__file__).resolve().parent / "apply_manager_error.log"


def load_events(component: Optional[str] = None) -> List[dict]:
    log_path = launch_utils.LAUNCH_LOG_PATH
    if not log_path.exists():
        return []
    events: List[dict] = []
    for line in log_path.read_text(encoding="utf-8", errors="ignore").splitlines():
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(entry, dict):
            continue
        if component and entry.get("component") != component:
            continue
        events.append(entry)
    return events


def find_last_event(events: Iterable[dict], names: Iterable[str]) -> Optional[dict]:
    lookup = set(names)
    for entry in reversed(list(events)):
        if entry.get("event") in lookup:
            return entry
    return None


def last_run(events: List[dict]) -> List[dict]:
    """Events recorded since the most recent CLI command."""
    for index in range(len(events) - 1, -1, -1):
        if events[index].get("event") == "cli-command":
            return events[index:]
    return events


def summarize(show_logs: bool) -> List[str]:
    lines: List[str] = []
    events = load_events()
    if not events:
        return ["No apply events recorded yet. Run apply_manager.py once to collect diagnostics."]

    run = last_run(events)
    aborted = find_last_event(run, ["aborted", "abort", "declined", "unhandled-exception"])
    finished = find_last_event(run, ["apply-finished"])
    if aborted:
        details = aborted.get("details", {})
        reason = details.get("error") or details.get("reason") or aborted.get("event")
        lines.append(f"Last run stopped: {aborted.get('component')} -> {reason}")
    elif finished:
        count = finished.get("details", {}).get("errors", 0)
        lines.append(f"Last apply finished with {count} item error(s).")
    else:
        lines.append("No finished or aborted run recorded.")

    for entry in run:
        if entry.get("event") == "item-error":
            lines.append(f"- {entry.get('component')}: {entry.get('details', {}).get('message', 'Unknown error')}")

    if show_logs:
        if ERROR_LOG.exists():
            lines.append("-- Error log excerpt --")
            lines.append(tail_file(ERROR_LOG))
        else:
            lines.append("No apply_manager_error.log present.")
    return lines


def tail_file(path: Path, max_lines: int = 40) -> str:
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except Exception as exc:
        return f"Unable to read log: {exc}"
    if len(lines) <= max_lines:
        return "\n".join(lines)
    return "\n".join(lines[-max_lines:])


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect the diagnostics recorded by the last apply run.")
    parser.add_argument("--logs", action="store_true", help="Show trailing error log excerpts if available.")
    args = parser.parse_args()
    for line in summarize(args.logs):
        print(line)


if __name__ == "__main__":
    main()
