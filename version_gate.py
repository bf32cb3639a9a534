"""Decide whether injection may run against the current backup and client."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from apply_config import ApplyConfig
from host_status import BackupStatus, HostStatus, get_backup_status, get_host_status
from launch_utils import (
    AskFunc,
    ApplyAborted,
    log_launch_event,
    print_info,
    print_warning,
    read_answer,
)

CONFIRM_PROMPT = "Continue anyway? [y/N] "
BACKUP_HINT = 'Please run "backup" before applying.'
REINSTALL_HINT = "The client cannot be backed up at this state. Please re-install it, then back it up again."


class GateAction(Enum):
    ABORT = "abort"
    WARN_CONFIRM = "warn-confirm"
    PROCEED = "proceed"


@dataclass(slots=True)
class GateDecision:
    action: GateAction
    error: Optional[str] = None
    warning: Optional[str] = None
    instructions: List[str] = field(default_factory=list)


def evaluate(backup: BackupStatus, host: HostStatus) -> GateDecision:
    if backup.is_empty():
        if host.is_backupable():
            return GateDecision(GateAction.ABORT, error=f"You haven't backed up. {BACKUP_HINT}")
        return GateDecision(
            GateAction.ABORT,
            error=f"You haven't backed up and the client cannot be backed up at this state. {REINSTALL_HINT}",
        )

    if backup.is_outdated():
        if host.is_mixed():
            instructions = ["The client possibly just had a new update.", BACKUP_HINT]
        elif host.is_stock():
            instructions = [BACKUP_HINT]
        else:
            instructions = [REINSTALL_HINT]
        return GateDecision(
            GateAction.WARN_CONFIRM,
            warning="Client version and backup version are mismatched.",
            instructions=instructions,
        )

    return GateDecision(GateAction.PROCEED)


def enforce(decision: GateDecision, ask: AskFunc = read_answer) -> None:
    """Report ``decision``; raise :class:`ApplyAborted` unless the run may continue."""
    if decision.action is GateAction.ABORT:
        log_launch_event("version_gate", "abort", {"reason": decision.error or ""})
        raise ApplyAborted(decision.error or "Cannot apply.")

    if decision.action is GateAction.WARN_CONFIRM:
        if decision.warning:
            print_warning(decision.warning)
        for line in decision.instructions:
            print_info(line)
        if not ask(CONFIRM_PROMPT, False):
            log_launch_event("version_gate", "declined", {})
            raise ApplyAborted("Aborted: backup is outdated.")
        log_launch_event("version_gate", "confirmed", {})


def check_states(config: ApplyConfig, ask: AskFunc = read_answer) -> GateDecision:
    backup = get_backup_status(config.prefs_path, config.backup_folder, config.backup_version)
    host = get_host_status(config.app_path)
    decision = evaluate(backup, host)
    log_launch_event(
        "version_gate",
        "evaluated",
        {"backup": backup.state.value, "host": host.state.value, "action": decision.action.value},
    )
    enforce(decision, ask)
    return decision
