"""Thumbnail job handler.

A job moves through received -> validated -> metadata-fetched ->
generating -> completed. Any failure raises JobError, which the queue
turns into a retry or a terminal failure. Success is only reported once
every derivative write has finished.
"""
import asyncio
import logging
from typing import Sequence

from files_manager.exceptions import JobError, MalformedIdError
from files_manager.services.blob_store import BlobStore
from files_manager.services.metadata_store import FileRecordStore
from files_manager.services.thumbnails import render_thumbnail
from files_manager.types import FileType, ThumbnailJob, parse_file_id, parse_owner_id

logger = logging.getLogger(__name__)

DEFAULT_WIDTHS = (500, 250, 100)


class ThumbnailWorker:
    def __init__(
        self,
        file_store: FileRecordStore,
        blob_store: BlobStore,
        widths: Sequence[int] = DEFAULT_WIDTHS,
    ):
        self.file_store = file_store
        self.blob_store = blob_store
        self.widths = tuple(widths)

    @staticmethod
    def validate(params: dict) -> ThumbnailJob:
        file_id = params.get("fileId")
        owner_id = params.get("userId")
        if not file_id:
            raise JobError("Missing fileId")
        if not owner_id:
            raise JobError("Missing userId")
        try:
            return ThumbnailJob(file_id=parse_file_id(file_id), owner_id=parse_owner_id(owner_id))
        except MalformedIdError as e:
            # No record can carry a malformed id
            raise JobError("File not found") from e

    async def handle(self, params: dict) -> None:
        logger.debug(f"Received thumbnail job {params}")
        job = self.validate(params)

        record = await self.file_store.find_one(job.file_id, owner_id=job.owner_id)
        if record is None or record.local_path is None:
            raise JobError("File not found")
        if record.type != FileType.IMAGE.value:
            raise JobError(f"File {record.id} is not an image")
        logger.debug(f"Fetched metadata for {record.id}, generating {self.widths}")

        try:
            source = await self.blob_store.read_bytes(record.local_path)
        except OSError as e:
            raise JobError(f"Source blob unreadable for {record.id}: {e}") from e

        results = await asyncio.gather(
            *(self._write_derivative(source, record.local_path, width) for width in self.widths),
            return_exceptions=True,
        )
        failed = [
            (width, result)
            for width, result in zip(self.widths, results)
            if isinstance(result, BaseException)
        ]
        if failed:
            for width, err in failed:
                logger.error(f"Thumbnail {width} for {record.id} failed: {err}")
            widths = ", ".join(str(width) for width, _ in failed)
            raise JobError(f"Thumbnail generation failed for widths {widths}") from failed[0][1]

        logger.info(f"Generated {len(self.widths)} thumbnails for {record.id}")

    async def _write_derivative(self, source: bytes, local_path: str, width: int) -> str:
        data = await asyncio.to_thread(render_thumbnail, source, width)
        path = self.blob_store.derivative_path(local_path, width)
        await self.blob_store.write(path, data)
        return path
