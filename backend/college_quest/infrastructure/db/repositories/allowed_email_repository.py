"""
Allowed Email Repository for College Quest

Emails are stored lowercase and compared case-insensitively.
"""

from typing import List
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.models.allowed_email import AllowedEmail
from college_quest.infrastructure.db.repositories.base_repository import add_in_savepoint
from college_quest.infrastructure.exceptions import DuplicateError


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AllowedEmailRepository:
    """Repository for the sign-in allow list."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[AllowedEmail]:
        stmt = select(AllowedEmail).order_by(AllowedEmail.email.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_allowed(self, email: str) -> bool:
        stmt = (
            select(AllowedEmail.id)
            .where(func.lower(AllowedEmail.email) == normalize_email(email))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add(self, email: str) -> AllowedEmail:
        """
        Raises:
            DuplicateError: the email is already on the list
        """
        normalized = normalize_email(email)
        if await self.is_allowed(normalized):
            raise DuplicateError(
                "Email already exists",
                operation="insert",
                table="allowed_emails",
            )

        entry = AllowedEmail(email=normalized)
        if not await add_in_savepoint(self.session, entry):
            raise DuplicateError(
                "Email already exists",
                operation="insert",
                table="allowed_emails",
            )
        await self.session.refresh(entry)
        return entry

    async def remove(self, entry_id: UUID) -> bool:
        stmt = delete(AllowedEmail).where(AllowedEmail.id == entry_id)
        result = await self.session.execute(stmt)
        return result.rowcount > 0
