"""Creating files, images and folders."""
import base64
import binascii
import logging
from typing import Any

from files_manager.exceptions import MalformedIdError, ValidationError
from files_manager.models.file_record import FileRecord
from files_manager.services.blob_store import BlobStore
from files_manager.services.metadata_store import FileRecordStore
from files_manager.services.thumbnail_queue import ThumbnailQueue
from files_manager.types import (
    FileId,
    FileType,
    FolderRef,
    OwnerId,
    ParentRef,
    ThumbnailJob,
    parent_ref_to_column,
    parse_parent_ref,
)

logger = logging.getLogger(__name__)


class UploadService:
    def __init__(
        self,
        file_store: FileRecordStore,
        blob_store: BlobStore,
        queue: ThumbnailQueue,
    ):
        self.file_store = file_store
        self.blob_store = blob_store
        self.queue = queue

    async def create(
        self,
        owner_id: OwnerId,
        name: Any,
        type: Any,
        parent_id: Any = 0,
        is_public: bool = False,
        data: Any = None,
    ) -> FileRecord:
        """Validate an upload request and persist it.

        Checks run in a fixed order and stop at the first failure:
        name, type, data, then the parent folder.

        Order of side effects for files and images: blob write, metadata
        insert, then (images only) the thumbnail job. A failed insert
        leaves the blob behind; a failed publish leaves the record without
        thumbnails. Neither is rolled back.

        Raises:
            ValidationError: with "Missing name", "Missing type",
                "Missing data", "Parent not found", "Parent is not a folder"
                or "Invalid data".
        """
        if not name or not isinstance(name, str):
            raise ValidationError("Missing name")
        file_type = FileType.parse(type)
        if file_type is None:
            raise ValidationError("Missing type")
        if file_type != FileType.FOLDER and (not data or not isinstance(data, str)):
            raise ValidationError("Missing data")
        parent = await self._resolve_parent(parent_id)

        record = FileRecord(
            user_id=owner_id,
            name=name,
            type=file_type.value,
            is_public=bool(is_public),
            parent_id=parent_ref_to_column(parent),
        )

        if file_type == FileType.FOLDER:
            record = await self.file_store.insert(record)
            logger.info(f"Created folder {record.id} ({name}) for {owner_id}")
            return record

        content = self._decode(data)
        local_path = self.blob_store.generate_path()
        await self.blob_store.write(local_path, content)
        logger.info(f"Stored {len(content)} bytes at {local_path}")

        record.local_path = local_path
        record = await self.file_store.insert(record)
        logger.info(f"Created {file_type.value} {record.id} ({name}) for {owner_id}")

        if file_type == FileType.IMAGE:
            await self.queue.publish(ThumbnailJob(file_id=FileId(record.id), owner_id=owner_id))

        return record

    async def _resolve_parent(self, parent_id: Any) -> ParentRef:
        try:
            parent = parse_parent_ref(parent_id)
        except MalformedIdError as e:
            raise ValidationError("Parent not found") from e
        if not isinstance(parent, FolderRef):
            return parent

        # Parent lookup is global: the folder need not belong to the uploader
        parent_record = await self.file_store.find_one(parent.id)
        if parent_record is None:
            raise ValidationError("Parent not found")
        if not parent_record.is_folder:
            raise ValidationError("Parent is not a folder")
        return parent

    @staticmethod
    def _decode(data: str) -> bytes:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Invalid data") from e
