"""Reading records and content: show, list, publish/unpublish, download."""
import logging
import mimetypes
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from files_manager.exceptions import MalformedIdError, NotFoundError, TypeMismatchError
from files_manager.models.file_record import FileRecord
from files_manager.services import access_control
from files_manager.services.blob_store import BlobStore
from files_manager.services.metadata_store import FileRecordStore
from files_manager.types import FileId, FileType, OwnerId, parse_file_id, parse_parent_ref

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class BlobContent:
    path: str
    content_type: str
    chunks: AsyncIterator[bytes]


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


def _parse_page(page: Any) -> int:
    try:
        return max(0, int(page))
    except (TypeError, ValueError):
        return 0


class RetrievalService:
    def __init__(
        self,
        file_store: FileRecordStore,
        blob_store: BlobStore,
        page_size: int = DEFAULT_PAGE_SIZE,
        derivative_widths: tuple[int, ...] = (500, 250, 100),
    ):
        self.file_store = file_store
        self.blob_store = blob_store
        self.page_size = page_size
        self.derivative_widths = derivative_widths

    @staticmethod
    def _file_id(raw: Any) -> FileId:
        try:
            return parse_file_id(raw)
        except MalformedIdError as e:
            raise NotFoundError() from e

    async def get_owned(self, owner_id: OwnerId, file_id: Any) -> FileRecord:
        record = await self.file_store.find_one(self._file_id(file_id), owner_id=owner_id)
        if record is None:
            raise NotFoundError()
        return record

    async def list_files(self, owner_id: OwnerId, parent_id: Any = 0, page: Any = 0) -> list[FileRecord]:
        """One page of the owner's records directly under `parent_id`.

        Ordered by insertion time. A malformed parent id matches nothing.
        """
        try:
            parent = parse_parent_ref(parent_id)
        except MalformedIdError:
            return []
        skip = _parse_page(page) * self.page_size
        return await self.file_store.paginate(owner_id, parent, skip=skip, limit=self.page_size)

    async def set_public(self, owner_id: OwnerId, file_id: Any, value: bool) -> FileRecord:
        record = await self.get_owned(owner_id, file_id)
        if not access_control.can_change_visibility(record, owner_id):
            raise NotFoundError()
        if record.is_public != value:
            await self.file_store.set_public(FileId(record.id), value)
            logger.info(f"File {record.id} is_public -> {value}")

        updated = await self.file_store.find_one(FileId(record.id), owner_id=owner_id)
        if updated is None:
            raise NotFoundError()
        return updated

    async def open_content(
        self,
        requester: Optional[OwnerId],
        file_id: Any,
        size: Any = None,
    ) -> BlobContent:
        """Resolve which blob to serve and start streaming it.

        Records the requester may not see are reported exactly like
        missing ones.

        Raises:
            NotFoundError: unknown id, hidden record, or missing blob
                (including a derivative that has not been generated yet).
            TypeMismatchError: the record is a folder.
        """
        record = await self.file_store.find_one(self._file_id(file_id))
        if record is None or not access_control.can_read_content(record, requester):
            raise NotFoundError()
        if record.is_folder:
            raise TypeMismatchError("A folder doesn't have content")

        path = self._resolve_path(record, size)
        if path is None or not await self.blob_store.exists(path):
            raise NotFoundError()

        return BlobContent(
            path=path,
            content_type=guess_content_type(record.name),
            chunks=self.blob_store.read(path),
        )

    def _resolve_path(self, record: FileRecord, size: Any) -> Optional[str]:
        if record.local_path is None:
            return None
        if record.type == FileType.IMAGE.value and size is not None:
            width = str(size)
            if width in {str(w) for w in self.derivative_widths}:
                return self.blob_store.derivative_path(record.local_path, int(width))
        return record.local_path
