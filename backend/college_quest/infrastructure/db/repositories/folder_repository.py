"""
Favorite Folder Repository for College Quest

CRUD for user-owned folders and their college items. Every read and write
is scoped by owner; a folder that exists but belongs to someone else is
indistinguishable from a missing one.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, and_, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.models.favorite import (
    FavoriteFolder,
    FavoriteFolderItem,
    FavoriteFolderUpdate,
)
from college_quest.infrastructure.db.repositories.base_repository import add_in_savepoint
from college_quest.infrastructure.exceptions import DatabaseError, DuplicateError


logger = logging.getLogger(__name__)


class FolderRepository:
    """Repository for favorite folders and folder items."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # Folders
    # =========================================================================

    async def list_for_user(self, user_id: UUID) -> List[FavoriteFolder]:
        stmt = (
            select(FavoriteFolder)
            .where(FavoriteFolder.user_id == user_id)
            .order_by(FavoriteFolder.position.asc(), FavoriteFolder.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_user(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(FavoriteFolder).where(
            FavoriteFolder.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def next_position(self, user_id: UUID) -> int:
        stmt = select(func.max(FavoriteFolder.position)).where(
            FavoriteFolder.user_id == user_id
        )
        result = await self.session.execute(stmt)
        last = result.scalar()
        return 0 if last is None else last + 1

    async def get_owned(self, folder_id: UUID, user_id: UUID) -> Optional[FavoriteFolder]:
        stmt = select(FavoriteFolder).where(and_(
            FavoriteFolder.id == folder_id,
            FavoriteFolder.user_id == user_id,
        ))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _name_taken(self, user_id: UUID, name: str) -> bool:
        stmt = select(FavoriteFolder.id).where(and_(
            FavoriteFolder.user_id == user_id,
            FavoriteFolder.name == name,
        ))
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def create(
        self,
        user_id: UUID,
        name: str,
        color: Optional[str] = None
    ) -> FavoriteFolder:
        """
        Create a folder at the end of the user's list.

        Raises:
            DuplicateError: the user already has a folder with this name
        """
        if await self._name_taken(user_id, name):
            raise DuplicateError(
                "A folder with this name already exists",
                operation="insert",
                table="favorite_folders",
            )

        folder = FavoriteFolder(
            user_id=user_id,
            name=name,
            color=color,
            position=await self.next_position(user_id),
        )
        if not await add_in_savepoint(self.session, folder):
            raise DuplicateError(
                "A folder with this name already exists",
                operation="insert",
                table="favorite_folders",
            )
        await self.session.refresh(folder)
        return folder

    async def update(
        self,
        folder: FavoriteFolder,
        data: FavoriteFolderUpdate
    ) -> FavoriteFolder:
        updates = data.model_dump(exclude_unset=True)
        new_name = updates.get("name")
        if new_name is not None and new_name != folder.name:
            if await self._name_taken(folder.user_id, new_name):
                raise DuplicateError(
                    "A folder with this name already exists",
                    operation="update",
                    table="favorite_folders",
                )

        for field, value in updates.items():
            setattr(folder, field, value)
        self.session.add(folder)
        await self.session.flush()
        await self.session.refresh(folder)
        return folder

    async def delete(self, folder: FavoriteFolder) -> None:
        """Delete a folder and its items."""
        await self.session.execute(
            delete(FavoriteFolderItem).where(FavoriteFolderItem.folder_id == folder.id)
        )
        await self.session.delete(folder)
        await self.session.flush()

    # =========================================================================
    # Items
    # =========================================================================

    async def list_item_ids(self, folder_id: UUID) -> List[UUID]:
        """College ids in a folder, newest first."""
        stmt = (
            select(FavoriteFolderItem.college_id)
            .where(FavoriteFolderItem.folder_id == folder_id)
            .order_by(FavoriteFolderItem.created_at.desc(), FavoriteFolderItem.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_item(self, folder_id: UUID, college_id: UUID) -> bool:
        stmt = select(FavoriteFolderItem.id).where(and_(
            FavoriteFolderItem.folder_id == folder_id,
            FavoriteFolderItem.college_id == college_id,
        ))
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add_item(self, folder_id: UUID, college_id: UUID) -> bool:
        """
        Put a college in a folder.

        Returns:
            True if added, False if it was already there
        """
        if await self.has_item(folder_id, college_id):
            return False

        item = FavoriteFolderItem(folder_id=folder_id, college_id=college_id)
        if await add_in_savepoint(self.session, item):
            return True

        if await self.has_item(folder_id, college_id):
            logger.info(f"College {college_id} added to folder {folder_id} concurrently")
            return False
        raise DatabaseError(
            "Failed to add item to folder",
            operation="insert",
            table="favorite_folder_items",
        )

    async def remove_item(self, folder_id: UUID, college_id: UUID) -> bool:
        stmt = delete(FavoriteFolderItem).where(and_(
            FavoriteFolderItem.folder_id == folder_id,
            FavoriteFolderItem.college_id == college_id,
        ))
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def all_item_ids_for_user(self, user_id: UUID) -> List[UUID]:
        """College ids in any of the user's folders."""
        stmt = (
            select(FavoriteFolderItem.college_id)
            .join(FavoriteFolder, FavoriteFolder.id == FavoriteFolderItem.folder_id)
            .where(FavoriteFolder.user_id == user_id)
            .distinct()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
