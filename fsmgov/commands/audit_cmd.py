"""Audit trail commands - verify and display JSONL exports."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..audit_log import AuditTrail, format_audit_entry, read_audit_log
from ..errors import FsmError
from ..lifecycle import status_type_for

logger = logging.getLogger(__name__)


def run_audit_verify(path: Path, kind: str = "grant") -> int:
    """Rebuild a trail from an export and check it.

    Every entry is re-recorded against the fixed table, then chain
    continuity is verified across the whole trail.
    """
    console = Console()
    err_console = Console(stderr=True)

    try:
        entries = read_audit_log(path, status_type_for(kind))
    except FsmError as e:
        err_console.print(f"Cannot read audit log: {escape(e.message)}", style="bold red", soft_wrap=True)
        return 1

    trail = AuditTrail()
    for i, entry in enumerate(entries):
        try:
            trail.record(entry)
        except FsmError as e:
            err_console.print(f"entries[{i}] rejected: {escape(e.message)}", style="bold red", soft_wrap=True)
            return 1

    try:
        trail.verify()
    except FsmError as e:
        err_console.print(f"Chain broken: {escape(e.message)}", style="bold red", soft_wrap=True)
        return 1

    grants = {entry.grant_id for entry in trail}
    logger.debug("verified %d entries across %d entities", len(trail), len(grants))
    console.print(f"OK: {len(trail)} audit entries verified ({len(grants)} entities).", style="green", soft_wrap=True)
    return 0


def run_audit_show(path: Path, kind: str = "grant", last_n: int | None = None) -> int:
    console = Console()
    err_console = Console(stderr=True)

    try:
        entries = read_audit_log(path, status_type_for(kind), last_n=last_n)
    except FsmError as e:
        err_console.print(f"Cannot read audit log: {escape(e.message)}", style="bold red", soft_wrap=True)
        return 1

    if not entries:
        console.print("No audit entries.", style="dim")
        return 0

    for entry in entries:
        console.print(format_audit_entry(entry), markup=False, highlight=False, soft_wrap=True)
    return 0
