"""Wiring: builds the store handles and services for one process.

Entry points (the FastAPI lifespan, the worker's main) own the lifecycle;
services only receive the handles they use.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from files_manager.config import Settings
from files_manager.database import build_engine, build_session_factory
from files_manager.models import Base
from files_manager.services.blob_store import BlobStore
from files_manager.services.metadata_store import FileRecordStore
from files_manager.services.retrieval_service import RetrievalService
from files_manager.services.session_store import RedisSessionStore, SessionStore
from files_manager.services.thumbnail_queue import ThumbnailQueue
from files_manager.services.thumbnail_worker import ThumbnailWorker
from files_manager.services.upload_service import UploadService


@dataclass
class Services:
    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    session_store: SessionStore
    file_store: FileRecordStore
    blob_store: BlobStore
    queue: ThumbnailQueue
    upload: UploadService
    retrieval: RetrievalService
    worker: ThumbnailWorker
    engine: Optional[AsyncEngine] = None

    async def db_alive(self) -> bool:
        try:
            async with self.session_factory() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    async def redis_alive(self) -> bool:
        is_alive = getattr(self.session_store, "is_alive", None)
        if is_alive is None:
            return True
        return await is_alive()

    async def close(self) -> None:
        disconnect = getattr(self.session_store, "disconnect", None)
        if disconnect is not None:
            await disconnect()
        if self.engine is not None:
            await self.engine.dispose()


def assemble(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    session_store: SessionStore,
    engine: Optional[AsyncEngine] = None,
) -> Services:
    file_store = FileRecordStore(session_factory)
    blob_store = BlobStore(settings.FOLDER_PATH)
    queue = ThumbnailQueue(session_factory, max_attempts=settings.THUMBNAIL_MAX_ATTEMPTS)
    return Services(
        settings=settings,
        session_factory=session_factory,
        session_store=session_store,
        file_store=file_store,
        blob_store=blob_store,
        queue=queue,
        upload=UploadService(file_store, blob_store, queue),
        retrieval=RetrievalService(
            file_store,
            blob_store,
            page_size=settings.PAGE_SIZE,
            derivative_widths=settings.THUMBNAIL_WIDTHS,
        ),
        worker=ThumbnailWorker(file_store, blob_store, widths=settings.THUMBNAIL_WIDTHS),
        engine=engine,
    )


async def build_services(settings: Settings, connect_sessions: bool = True) -> Services:
    """Connect to the database (creating tables) and, for the API, to Redis."""
    engine = build_engine(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_store = RedisSessionStore(settings.REDIS_URL, key_prefix=settings.SESSION_KEY_PREFIX)
    if connect_sessions:
        await session_store.connect()

    return assemble(settings, build_session_factory(engine), session_store, engine=engine)
