"""User audit and profile repository integration tests.

Require a migrated Postgres; the session is rolled back after each test.
"""

import pytest
from sqlalchemy import select

from app.application.dtos.user_audit import AuditEntryCreate, AuditLogFilter
from app.application.services.audit_recorder import AuditRecorder
from app.infrastructure.persistence.models import Profile, UserAudit
from app.infrastructure.persistence.repositories import (
    ProfileRepository,
    UserAuditRepository,
)
from app.shared.enums import AuditAction
from app.shared.utils.generators import generate_cuid


async def _profile(db_session, **fields) -> Profile:
    profile = Profile(id=generate_cuid(), **fields)
    db_session.add(profile)
    await db_session.flush()
    return profile


@pytest.mark.requires_db
async def test_create_and_list_with_performer(db_session) -> None:
    """Entries come back newest first with the performer's profile fields."""
    subject = await _profile(db_session, name="Subject", email=f"{generate_cuid()}@test.com")
    admin = await _profile(db_session, name="Admin User", email=f"{generate_cuid()}@test.com")
    repo = UserAuditRepository(db_session)

    first = await repo.create(
        AuditEntryCreate(
            subject_id=subject.id,
            action="UPDATE",
            performed_by=admin.id,
            changes={"before": {"name": "Old"}, "after": {"name": "New"}},
            reason="Profile update",
        )
    )
    second = await repo.create(
        AuditEntryCreate(subject_id=subject.id, action="RESTORE", performed_by=None, changes=None)
    )

    entries = await repo.list(AuditLogFilter(subject_id=subject.id))
    # Same transaction, same now(): insertion order breaks the tie.
    assert [e.id for e in entries] == [second.id, first.id]
    assert entries[1].performer.name == "Admin User"
    assert entries[1].performer.email == admin.email
    assert entries[0].performer.name is None
    assert entries[0].changes is None
    assert entries[1].changes == {"before": {"name": "Old"}, "after": {"name": "New"}}


@pytest.mark.requires_db
async def test_changes_none_is_stored_as_json_null(db_session) -> None:
    subject = await _profile(db_session)
    repo = UserAuditRepository(db_session)
    await repo.create(
        AuditEntryCreate(subject_id=subject.id, action="RESTORE", performed_by=None, changes=None)
    )
    raw = await db_session.execute(
        select(UserAudit.changes.is_(None)).where(UserAudit.user_id == subject.id)
    )
    # JSON null is a value, not SQL NULL.
    assert raw.scalar_one() is False


@pytest.mark.requires_db
async def test_count_distinct_group_and_latest(db_session) -> None:
    subject = await _profile(db_session)
    repo = UserAuditRepository(db_session)
    for action in ("UPDATE", "UPDATE", "ROLE_CHANGE"):
        await repo.create(
            AuditEntryCreate(subject_id=subject.id, action=action, performed_by=None, changes=None)
        )

    only_updates = AuditLogFilter(subject_id=subject.id, actions=("UPDATE",))
    assert await repo.count(only_updates) == 2
    assert len(await repo.list(only_updates, skip=1, limit=5)) == 1
    assert await repo.distinct_actions(subject.id) == ["ROLE_CHANGE", "UPDATE"]
    assert await repo.count_by_action(subject.id) == {"UPDATE": 2, "ROLE_CHANGE": 1}
    latest = await repo.get_latest(subject.id)
    assert latest is not None
    assert latest.action == "ROLE_CHANGE"


@pytest.mark.requires_db
async def test_recorder_and_profile_update_share_the_session(db_session) -> None:
    subject = await _profile(db_session, status="PENDING")
    profiles = ProfileRepository(db_session)
    recorder = AuditRecorder(UserAuditRepository)

    updated = await profiles.update_fields(subject.id, status="ACTIVE")
    entry = await recorder.record(
        db_session,
        subject_id=subject.id,
        action=AuditAction.STATUS_CHANGE,
        before={"status": "PENDING", "password": "x"},
        after={"status": updated.status, "password": "y"},
    )

    assert updated.status == "ACTIVE"
    assert entry.changes == {"before": {"status": "PENDING"}, "after": {"status": "ACTIVE"}}
    assert (await profiles.get_by_id(subject.id)).status == "ACTIVE"


@pytest.mark.requires_db
async def test_audit_rows_cannot_be_updated(db_session) -> None:
    subject = await _profile(db_session)
    repo = UserAuditRepository(db_session)
    created = await repo.create(
        AuditEntryCreate(subject_id=subject.id, action="UPDATE", performed_by=None, changes=None)
    )
    row = await db_session.get(UserAudit, created.id)
    row.reason = "tampered"
    with pytest.raises(ValueError):
        await db_session.flush()


@pytest.mark.requires_db
async def test_unknown_actor_is_recorded_without_performer_details(db_session) -> None:
    subject = await _profile(db_session)
    repo = UserAuditRepository(db_session)
    await repo.create(
        AuditEntryCreate(
            subject_id=subject.id, action="UPDATE", performed_by="sso:ext-42", changes=None
        )
    )

    [entry] = await repo.list(AuditLogFilter(subject_id=subject.id))
    assert entry.performed_by == "sso:ext-42"
    assert entry.performer.name is None
    assert entry.performer.email is None


@pytest.mark.requires_db
async def test_deleting_an_actor_keeps_its_entries(db_session) -> None:
    subject = await _profile(db_session)
    actor = await _profile(db_session, name="Former Admin")
    repo = UserAuditRepository(db_session)
    await repo.create(
        AuditEntryCreate(
            subject_id=subject.id, action="UPDATE", performed_by=actor.id, changes=None
        )
    )

    await db_session.delete(actor)
    await db_session.flush()

    [entry] = await repo.list(AuditLogFilter(subject_id=subject.id))
    assert entry.performed_by == actor.id
    assert entry.performer.name is None
