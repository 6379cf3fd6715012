"""Audit trail recording, verification and JSONL export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fsmgov.audit_log import (
    AuditEntry,
    AuditTrail,
    dumps_jsonl,
    format_audit_entry,
    read_audit_log,
    write_audit_log,
)
from fsmgov.errors import InvalidInput, InvalidStateTransition
from fsmgov.lifecycle import GrantStatus, IdeaStatus


ACTOR = bytes(32)


def _entry(
    from_state,
    to_state,
    *,
    grant_id: int = 1,
    timestamp: int = 1_000,
    action: str = "test",
    metadata: str | None = "metadata",
) -> AuditEntry:
    return AuditEntry(
        grant_id=grant_id,
        actor=ACTOR,
        from_state=from_state,
        to_state=to_state,
        action=action,
        timestamp=timestamp,
        metadata=metadata,
    )


def test_record_permitted_transition() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED))
    assert len(trail) == 1
    assert trail.entries()[0].to_state is GrantStatus.APPROVED


def test_record_backward_transition_rejected() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED))
    with pytest.raises(InvalidStateTransition):
        trail.record(_entry(GrantStatus.APPROVED, GrantStatus.PENDING))
    assert len(trail) == 1


def test_record_self_transition_allowed() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.ARCHIVED, GrantStatus.ARCHIVED, action="noop"))
    assert len(trail) == 1


def test_record_idea_entries() -> None:
    trail = AuditTrail()
    trail.record(_entry(IdeaStatus.DRAFT, IdeaStatus.VOTING))
    trail.record(_entry(IdeaStatus.VOTING, IdeaStatus.APPROVED))
    trail.verify()
    with pytest.raises(InvalidStateTransition):
        trail.record(_entry(IdeaStatus.APPROVED, IdeaStatus.COMMERCIALIZATION))


def test_record_mixed_kinds_rejected() -> None:
    trail = AuditTrail()
    with pytest.raises(InvalidStateTransition):
        trail.record(_entry(GrantStatus.PENDING, IdeaStatus.APPROVED))
    assert len(trail) == 0


def test_verify_chain_success() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED, timestamp=1_000))
    trail.record(_entry(GrantStatus.APPROVED, GrantStatus.ACTIVE, timestamp=1_100))
    trail.verify()


def test_verify_chain_gap() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED, timestamp=1_000))
    # Legal on its own, but the grant never reached Active.
    trail.record(_entry(GrantStatus.ACTIVE, GrantStatus.COMPLETED, timestamp=1_100))
    with pytest.raises(InvalidStateTransition, match=r"entries\[1\]"):
        trail.verify()


def test_verify_empty_and_single() -> None:
    AuditTrail().verify()
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.ACTIVE, GrantStatus.EXPIRED))
    trail.verify()


def test_trail_contains_multiple_grants() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED))
    trail.record(
        AuditEntry(
            grant_id=2,
            actor=bytes([1] * 32),
            from_state=GrantStatus.PENDING,
            to_state=GrantStatus.APPROVED,
            action="approve",
            timestamp=2_000,
        )
    )
    assert len(trail.entries()) == 2
    trail.verify()


def test_verify_skips_non_adjacent_entries_of_same_grant() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED, grant_id=1))
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.REJECTED, grant_id=2))
    # Grant 1 jumps from Approved to Suspended -> Active; the gap is not adjacent.
    trail.record(_entry(GrantStatus.SUSPENDED, GrantStatus.ACTIVE, grant_id=1))
    trail.verify()


def test_verify_same_label_different_kind_breaks_chain() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED))
    trail.record(_entry(IdeaStatus.APPROVED, IdeaStatus.IN_PROGRESS))
    with pytest.raises(InvalidStateTransition):
        trail.verify()


def test_entries_is_read_only_snapshot() -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED))
    entries = trail.entries()
    assert isinstance(entries, tuple)
    trail.record(_entry(GrantStatus.APPROVED, GrantStatus.ACTIVE))
    assert len(entries) == 1
    assert [e.to_state for e in trail] == [GrantStatus.APPROVED, GrantStatus.ACTIVE]


def test_entry_is_immutable() -> None:
    entry = _entry(GrantStatus.PENDING, GrantStatus.APPROVED)
    with pytest.raises(AttributeError):
        entry.action = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    "fields",
    [
        {"actor": bytes(31)},
        {"actor": bytes(33)},
        {"grant_id": -1},
        {"grant_id": 1.5},
        {"grant_id": 2**64},
        {"timestamp": 2**63},
        {"timestamp": -(2**63) - 1},
        {"timestamp": "1000"},
        {"from_state": "Pending"},
    ],
)
def test_entry_field_checks(fields: dict) -> None:
    base = {
        "grant_id": 1,
        "actor": ACTOR,
        "from_state": GrantStatus.PENDING,
        "to_state": GrantStatus.APPROVED,
        "action": "approve",
        "timestamp": 1_000,
    }
    with pytest.raises(InvalidInput):
        AuditEntry(**{**base, **fields})


def test_actor_accepts_byte_sequences() -> None:
    entry = AuditEntry(
        grant_id=7,
        actor=[255] * 32,  # type: ignore[arg-type]
        from_state=GrantStatus.PENDING,
        to_state=GrantStatus.APPROVED,
        action="approve",
        timestamp=0,
    )
    assert entry.actor == b"\xff" * 32


def test_export_format() -> None:
    entry = _entry(GrantStatus.PENDING, GrantStatus.APPROVED)
    data = json.loads(json.dumps(entry.to_dict()))
    assert data == {
        "grant_id": 1,
        "actor": [0] * 32,
        "from_state": "Pending",
        "to_state": "Approved",
        "action": "test",
        "timestamp": 1_000,
        "metadata": "metadata",
    }
    assert AuditEntry.from_dict(data) == entry


def test_from_dict_idea_states() -> None:
    entry = _entry(IdeaStatus.RESUBMITTED, IdeaStatus.UNDER_REVIEW, metadata=None)
    assert AuditEntry.from_dict(entry.to_dict(), IdeaStatus) == entry
    with pytest.raises(InvalidInput):
        AuditEntry.from_dict(entry.to_dict(), GrantStatus)


@pytest.mark.parametrize(
    "patch",
    [
        {"actor": [0] * 31},
        {"actor": [256] + [0] * 31},
        {"actor": "00" * 32},
        {"from_state": "Draft"},
        {"action": 5},
        {"metadata": {"k": "v"}},
    ],
)
def test_from_dict_rejects_bad_fields(patch: dict) -> None:
    data = {**_entry(GrantStatus.PENDING, GrantStatus.APPROVED).to_dict(), **patch}
    with pytest.raises(InvalidInput):
        AuditEntry.from_dict(data)


def test_from_dict_missing_field() -> None:
    data = _entry(GrantStatus.PENDING, GrantStatus.APPROVED).to_dict()
    del data["timestamp"]
    with pytest.raises(InvalidInput, match="timestamp"):
        AuditEntry.from_dict(data)


def test_jsonl_round_trip(tmp_path: Path) -> None:
    trail = AuditTrail()
    trail.record(_entry(GrantStatus.PENDING, GrantStatus.APPROVED, timestamp=1_000, action="approve"))
    trail.record(_entry(GrantStatus.APPROVED, GrantStatus.ACTIVE, timestamp=1_100, action="activate", metadata=None))

    text = dumps_jsonl(trail.entries())
    lines = text.splitlines()
    assert len(lines) == 2
    for line in lines:
        value = json.loads(line)
        for key in ("grant_id", "actor", "from_state", "to_state", "action", "timestamp", "metadata"):
            assert key in value

    path = tmp_path / "exports" / "audit.jsonl"
    assert write_audit_log(path, trail) == 2
    entries = read_audit_log(path)
    assert entries == list(trail.entries())

    rebuilt = AuditTrail.from_entries(entries)
    rebuilt.verify()
    assert read_audit_log(path, last_n=1) == [trail.entries()[-1]]


def test_read_audit_log_errors(tmp_path: Path) -> None:
    with pytest.raises(InvalidInput, match="not found"):
        read_audit_log(tmp_path / "missing.jsonl")

    good = json.dumps(_entry(GrantStatus.PENDING, GrantStatus.APPROVED).to_dict())
    path = tmp_path / "audit.jsonl"
    path.write_text(f"{good}\n\n{{broken\n", encoding="utf-8")
    with pytest.raises(InvalidInput, match=":3:"):
        read_audit_log(path)


def test_read_audit_log_undecodable_line(tmp_path: Path) -> None:
    good = json.dumps(_entry(GrantStatus.PENDING, GrantStatus.APPROVED).to_dict())
    path = tmp_path / "audit.jsonl"
    path.write_bytes(good.encode("utf-8") + b"\n\xff\xfe\n")
    with pytest.raises(InvalidInput, match=r":2: not valid UTF-8"):
        read_audit_log(path)


def test_from_entries_rejects_illegal_step() -> None:
    bad = _entry(GrantStatus.ACTIVE, GrantStatus.PENDING)
    with pytest.raises(InvalidStateTransition):
        AuditTrail.from_entries([bad])


def test_format_audit_entry() -> None:
    text = format_audit_entry(_entry(GrantStatus.PENDING, GrantStatus.APPROVED, action="approve"))
    assert "Pending -> Approved" in text
    assert "(approve)" in text
    assert "metadata: metadata" in text
    assert "0" * 64 in text


def test_entry_accepts_64_bit_extremes() -> None:
    entry = _entry(GrantStatus.PENDING, GrantStatus.APPROVED, grant_id=2**64 - 1, timestamp=-(2**63))
    assert AuditEntry.from_dict(entry.to_dict()) == entry


def test_from_dict_rejects_out_of_range_grant_id() -> None:
    data = {**_entry(GrantStatus.PENDING, GrantStatus.APPROVED).to_dict(), "grant_id": 2**70}
    with pytest.raises(InvalidInput, match="grant_id"):
        AuditEntry.from_dict(data)
