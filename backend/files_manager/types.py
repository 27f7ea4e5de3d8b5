"""Identifier and value types used across stores, services and the worker."""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType, Optional, Union

from files_manager.exceptions import MalformedIdError

OwnerId = NewType("OwnerId", uuid.UUID)
FileId = NewType("FileId", uuid.UUID)


class FileType(str, Enum):
    FOLDER = "folder"
    FILE = "file"
    IMAGE = "image"

    @classmethod
    def parse(cls, value: Any) -> Optional["FileType"]:
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


def _parse_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise MalformedIdError(f"Not an id: {value!r}")
    try:
        return uuid.UUID(value)
    except ValueError as e:
        raise MalformedIdError(f"Not an id: {value!r}") from e


def parse_owner_id(value: Any) -> OwnerId:
    return OwnerId(_parse_uuid(value))


def parse_file_id(value: Any) -> FileId:
    return FileId(_parse_uuid(value))


@dataclass(frozen=True)
class Root:
    """Sentinel parent: the record sits at the top of its owner's tree."""

    def serialize(self) -> int:
        return 0


@dataclass(frozen=True)
class FolderRef:
    id: FileId

    def serialize(self) -> str:
        return str(self.id)


ParentRef = Union[Root, FolderRef]

ROOT = Root()

# Wire representations of the root sentinel
_ROOT_VALUES = (None, 0, "0", "")


def parse_parent_ref(value: Any) -> ParentRef:
    """Normalize any wire representation of a parent id.

    Raises:
        MalformedIdError: the value is neither the root sentinel nor an id.
    """
    if isinstance(value, bool):
        raise MalformedIdError(f"Not a parent id: {value!r}")
    if value in _ROOT_VALUES:
        return ROOT
    return FolderRef(parse_file_id(value))


def parent_ref_from_column(parent_id: Optional[uuid.UUID]) -> ParentRef:
    """Stored parent ids are NULL for root."""
    if parent_id is None:
        return ROOT
    return FolderRef(FileId(parent_id))


def parent_ref_to_column(parent: ParentRef) -> Optional[uuid.UUID]:
    if isinstance(parent, FolderRef):
        return parent.id
    return None


@dataclass(frozen=True)
class ThumbnailJob:
    """Queue message asking for the derivatives of one image record."""

    file_id: FileId
    owner_id: OwnerId

    def to_params(self) -> dict:
        return {"fileId": str(self.file_id), "userId": str(self.owner_id)}
