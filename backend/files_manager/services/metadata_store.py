"""FileRecord persistence. Each call is one session and at most one commit."""
import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from files_manager.models.file_record import FileRecord
from files_manager.types import FileId, OwnerId, ParentRef, parent_ref_to_column

logger = logging.getLogger(__name__)


class FileRecordStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def insert(self, record: FileRecord) -> FileRecord:
        async with self.session_factory() as db:
            db.add(record)
            await db.commit()
            await db.refresh(record)
        return record

    async def find_one(
        self,
        file_id: FileId,
        owner_id: Optional[OwnerId] = None,
    ) -> Optional[FileRecord]:
        """Look a record up by id, optionally restricted to one owner."""
        query = select(FileRecord).where(FileRecord.id == file_id)
        if owner_id is not None:
            query = query.where(FileRecord.user_id == owner_id)
        async with self.session_factory() as db:
            result = await db.execute(query)
            return result.scalar_one_or_none()

    async def set_public(self, file_id: FileId, value: bool) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(FileRecord)
                .where(FileRecord.id == file_id)
                .values(is_public=value)
            )
            await db.commit()

    async def paginate(
        self,
        owner_id: OwnerId,
        parent: ParentRef,
        skip: int,
        limit: int,
    ) -> list[FileRecord]:
        parent_id = parent_ref_to_column(parent)
        query = select(FileRecord).where(FileRecord.user_id == owner_id)
        if parent_id is None:
            query = query.where(FileRecord.parent_id.is_(None))
        else:
            query = query.where(FileRecord.parent_id == parent_id)
        query = (
            query.order_by(FileRecord.created_at, FileRecord.id)
            .offset(skip)
            .limit(limit)
        )
        async with self.session_factory() as db:
            result = await db.execute(query)
            return list(result.scalars().all())

    async def count(self) -> int:
        async with self.session_factory() as db:
            result = await db.execute(select(func.count()).select_from(FileRecord))
            return result.scalar_one()
