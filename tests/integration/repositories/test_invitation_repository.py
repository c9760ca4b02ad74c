"""
InvitationRepository against a real SQLite database: versioned updates and
the one-live-invitation-per-email constraint.
"""

from datetime import timedelta

import pytest

from src.adapter.repositories.invitation_repository import InvitationRepository
from src.app.repositories.invitation_repository import DuplicateActiveInvitationError
from src.domain.base import utcnow
from src.domain.entities import Invitation, InvitationStatus
from src.domain.onboarding_rules import build_transition
from tests.fixtures.fakes import build_invitation


@pytest.mark.asyncio
async def test_compare_and_set_bumps_version(db_session):
    repo = InvitationRepository(db_session)
    invitation = await repo.create(build_invitation(status=InvitationStatus.initiated))
    await db_session.commit()

    updated = await repo.compare_and_set(
        invitation,
        build_transition(invitation, InvitationStatus.invitation_sent, invitation_sent_at=utcnow()),
    )
    await db_session.commit()

    assert updated is True
    assert invitation.status == InvitationStatus.invitation_sent
    assert invitation.version == 2
    assert invitation.invitation_sent_at is not None


@pytest.mark.asyncio
async def test_compare_and_set_loses_against_stale_version(db_session):
    repo = InvitationRepository(db_session)
    invitation = await repo.create(build_invitation(status=InvitationStatus.initiated))
    await db_session.commit()
    # A second writer still holding version 1
    stale = Invitation(**invitation.model_dump())

    await repo.compare_and_set(
        invitation, build_transition(invitation, InvitationStatus.invitation_sent)
    )
    await db_session.commit()

    updated = await repo.compare_and_set(stale, {"status": InvitationStatus.cancelled})

    assert updated is False
    reloaded = await repo.reload(invitation)
    assert reloaded.status == InvitationStatus.invitation_sent
    assert reloaded.version == 2


@pytest.mark.asyncio
async def test_second_live_invitation_for_email_is_refused(db_session):
    repo = InvitationRepository(db_session)
    await repo.create(build_invitation(email="dup@example.com"))
    await db_session.commit()

    with pytest.raises(DuplicateActiveInvitationError):
        await repo.create(build_invitation(email="dup@example.com"))


@pytest.mark.asyncio
async def test_terminal_invitation_releases_email(db_session):
    repo = InvitationRepository(db_session)
    first = await repo.create(build_invitation(email="free@example.com"))
    await db_session.commit()
    await repo.compare_and_set(
        first, build_transition(first, InvitationStatus.cancelled, cancelled_at=utcnow())
    )
    await db_session.commit()

    second = await repo.create(build_invitation(email="free@example.com"))
    await db_session.commit()

    assert (await repo.get_open_by_email("free@example.com")).id == second.id


@pytest.mark.asyncio
async def test_search_and_count(db_session):
    repo = InvitationRepository(db_session)
    now = utcnow()
    for i, status in enumerate(
        [InvitationStatus.invitation_sent, InvitationStatus.completed, InvitationStatus.failed]
    ):
        await repo.create(
            build_invitation(
                email=f"user{i}@example.com",
                status=status,
                initiated_by="hr-manager-2" if i else "hr-admin-1",
                initiated_at=now - timedelta(days=i),
            )
        )
    await db_session.commit()

    page, total = await repo.search(offset=0, limit=2)
    assert total == 3
    assert [inv.email for inv in page] == ["user0@example.com", "user1@example.com"]

    scoped, scoped_total = await repo.search(initiated_by="hr-manager-2")
    assert scoped_total == 2

    counts = await repo.count_by_status()
    assert counts == {
        InvitationStatus.invitation_sent: 1,
        InvitationStatus.completed: 1,
        InvitationStatus.failed: 1,
    }
