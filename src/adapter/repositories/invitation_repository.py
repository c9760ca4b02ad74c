from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invitation_repository import (
    DuplicateActiveInvitationError,
    IInvitationRepository,
)
from src.domain.entities import Invitation, InvitationStatus


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        stmt = select(Invitation).where(Invitation.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_open_by_email(self, email: str) -> Optional[Invitation]:
        """Get the non-terminal invitation for an email"""
        stmt = select(Invitation).where(Invitation.active_email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        self.session.add(invitation)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateActiveInvitationError(invitation.email) from exc
        await self.session.refresh(invitation)
        return invitation

    async def compare_and_set(self, invitation: Invitation, changes: Dict[str, Any]) -> bool:
        """Versioned update; the tracked instance is only touched by the refresh"""
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation.id,
                Invitation.version == invitation.version,
                Invitation.status == invitation.status,
            )
            .values(**changes, version=invitation.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self.session.flush()
        await self.session.refresh(invitation)
        return True

    async def reload(self, invitation: Invitation) -> Invitation:
        await self.session.refresh(invitation)
        return invitation

    async def search(
        self,
        status: Optional[InvitationStatus] = None,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Invitation], int]:
        """Get a page of invitations, newest first, plus the total match count"""
        conditions = self._conditions(initiated_by, initiated_from, initiated_to)
        if status is not None:
            conditions.append(Invitation.status == status)

        count_stmt = select(func.count()).select_from(Invitation).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Invitation)
            .where(*conditions)
            .order_by(Invitation.initiated_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def count_by_status(
        self,
        initiated_by: Optional[str] = None,
        initiated_from: Optional[datetime] = None,
        initiated_to: Optional[datetime] = None,
    ) -> Dict[InvitationStatus, int]:
        """Count invitations per status"""
        conditions = self._conditions(initiated_by, initiated_from, initiated_to)
        stmt = (
            select(Invitation.status, func.count())
            .where(*conditions)
            .group_by(Invitation.status)
        )
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}

    @staticmethod
    def _conditions(
        initiated_by: Optional[str],
        initiated_from: Optional[datetime],
        initiated_to: Optional[datetime],
    ) -> list:
        conditions = []
        if initiated_by is not None:
            conditions.append(Invitation.initiated_by == initiated_by)
        if initiated_from is not None:
            conditions.append(Invitation.initiated_at >= initiated_from)
        if initiated_to is not None:
            conditions.append(Invitation.initiated_at <= initiated_to)
        return conditions
