"""
Audit trail for fixed-table transitions.

This module provides:
- Immutable audit entries for one performed transition each
- An append-only trail that rejects illegal steps on record
- Chain continuity checks over the recorded history
- JSON Lines export and import
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator

from .errors import InvalidInput, InvalidStateTransition
from .lifecycle import GrantStatus, IdeaStatus, Status, parse_status, validate_transition

logger = logging.getLogger(__name__)

ACTOR_LENGTH = 32
U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


@dataclass(frozen=True)
class AuditEntry:
    """A single recorded transition of one entity."""

    grant_id: int
    actor: bytes
    from_state: Status
    to_state: Status
    action: str
    timestamp: int
    metadata: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.grant_id, bool) or not isinstance(self.grant_id, int) or not 0 <= self.grant_id <= U64_MAX:
            raise InvalidInput(f"grant_id must be an unsigned 64-bit integer, got {self.grant_id!r}")
        if isinstance(self.actor, (bytearray, list, tuple)):
            object.__setattr__(self, "actor", bytes(self.actor))
        if not isinstance(self.actor, bytes) or len(self.actor) != ACTOR_LENGTH:
            raise InvalidInput(f"actor must be exactly {ACTOR_LENGTH} bytes")
        for name in ("from_state", "to_state"):
            if not isinstance(getattr(self, name), (GrantStatus, IdeaStatus)):
                raise InvalidInput(f"{name} must be a GrantStatus or IdeaStatus")
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int) or not I64_MIN <= self.timestamp <= I64_MAX:
            raise InvalidInput(f"timestamp must be a signed 64-bit integer, got {self.timestamp!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "grant_id": self.grant_id,
            "actor": list(self.actor),
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "action": self.action,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Any, status_type: type = GrantStatus) -> "AuditEntry":
        """Create from dictionary. States are parsed as `status_type` labels."""
        if not isinstance(data, dict):
            raise InvalidInput("audit entry must be an object")
        try:
            actor = data["actor"]
            if not isinstance(actor, list) or not all(
                isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in actor
            ):
                raise InvalidInput("actor must be an array of byte values")
            action = data["action"]
            if not isinstance(action, str):
                raise InvalidInput("action must be a string")
            metadata = data.get("metadata")
            if metadata is not None and not isinstance(metadata, str):
                raise InvalidInput("metadata must be a string or null")
            return cls(
                grant_id=data["grant_id"],
                actor=bytes(actor),
                from_state=parse_status(status_type, data["from_state"]),
                to_state=parse_status(status_type, data["to_state"]),
                action=action,
                timestamp=data["timestamp"],
                metadata=metadata,
            )
        except KeyError as e:
            raise InvalidInput(f"audit entry missing field {e.args[0]!r}") from None


class AuditTrail:
    """Ordered, append-only log of audit entries.

    Entries for different entities may be interleaved. The trail never drops
    or rewrites an entry once recorded.
    """

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    @classmethod
    def from_entries(cls, entries: Iterable[AuditEntry]) -> "AuditTrail":
        """Rebuild a trail, re-checking every entry against the tables."""
        trail = cls()
        for entry in entries:
            trail.record(entry)
        return trail

    def record(self, entry: AuditEntry) -> None:
        """Append `entry` if its step is legal, else raise InvalidStateTransition."""
        validate_transition(entry.from_state, entry.to_state)
        self._entries.append(entry)

    def verify(self) -> None:
        """Check chain continuity between adjacent entries of the same entity.

        Adjacent entries for different entities are skipped, not deferred.
        """
        for i in range(1, len(self._entries)):
            first = self._entries[i - 1]
            second = self._entries[i]
            if first.grant_id != second.grant_id:
                continue
            if type(first.to_state) is not type(second.from_state) or first.to_state is not second.from_state:
                raise InvalidStateTransition(
                    f"entries[{i}]: grant {second.grant_id} starts at {second.from_state.value} "
                    f"but previous entry ended at {first.to_state.value}"
                )

    def entries(self) -> tuple[AuditEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AuditEntry]:
        return iter(tuple(self._entries))


def dumps_jsonl(entries: Iterable[AuditEntry]) -> str:
    """One JSON object per line, in trail order."""
    return "".join(json.dumps(entry.to_dict()) + "\n" for entry in entries)


def write_audit_log(path: Path, trail: AuditTrail) -> int:
    """Write the trail as JSON Lines. Returns the number of entries written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    entries = trail.entries()
    path.write_text(dumps_jsonl(entries), encoding="utf-8")
    logger.debug("wrote %d audit entries to %s", len(entries), path)
    return len(entries)


def read_audit_log(path: Path, status_type: type = GrantStatus, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from a JSON Lines export.

    Args:
        path: Path to the export
        status_type: Status enumeration the entries' states belong to
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries (oldest first)
    """
    if not path.exists():
        raise InvalidInput(f"audit log not found: {path}")

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise InvalidInput(f"Failed to read {path}: {e}") from e

    entries: list[AuditEntry] = []
    for lineno, raw_line in enumerate(raw.split(b"\n"), start=1):
        try:
            line = raw_line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise InvalidInput(f"{path}:{lineno}: not valid UTF-8 ({e.reason})") from e
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"{path}:{lineno}: malformed JSON ({e.msg})") from e
        try:
            entries.append(AuditEntry.from_dict(data, status_type))
        except InvalidInput as e:
            raise InvalidInput(f"{path}:{lineno}: {e.message}") from e

    logger.debug("read %d audit entries from %s", len(entries), path)
    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [
        f"[{entry.timestamp}] grant {entry.grant_id}: {entry.from_state.value} -> {entry.to_state.value} ({entry.action})",
        f"  actor: {entry.actor.hex()}",
    ]
    if entry.metadata:
        lines.append(f"  metadata: {entry.metadata}")
    return "\n".join(lines)
