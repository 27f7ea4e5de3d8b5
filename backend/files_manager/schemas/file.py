"""File request/response schemas."""
from typing import Any, Union

from files_manager.models.file_record import FileRecord
from files_manager.schemas.base import CamelModel


class FileCreate(CamelModel):
    # Untyped on purpose: the upload service checks name, type and data in a
    # fixed order and answers a wrong type the same way as a missing value.
    name: Any = None
    type: Any = None
    parent_id: Any = 0
    is_public: bool = False
    data: Any = None


class FileResponse(CamelModel):
    id: str
    user_id: str
    name: str
    type: str
    is_public: bool
    parent_id: Union[int, str]

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileResponse":
        return cls(
            id=str(record.id),
            user_id=str(record.user_id),
            name=record.name,
            type=record.type,
            is_public=record.is_public,
            parent_id=record.parent.serialize(),
        )


class StatusResponse(CamelModel):
    redis: bool
    db: bool


class StatsResponse(CamelModel):
    files: int
