"""Who may do what with a FileRecord. Pure functions, no I/O."""
from typing import Optional

from files_manager.models.file_record import FileRecord
from files_manager.types import OwnerId


def is_owner(record: FileRecord, requester: Optional[OwnerId]) -> bool:
    return requester is not None and record.user_id == requester


def can_read_content(record: FileRecord, requester: Optional[OwnerId]) -> bool:
    """Public records are readable by anyone, private ones by their owner only."""
    return record.is_public or is_owner(record, requester)


def can_change_visibility(record: FileRecord, requester: Optional[OwnerId]) -> bool:
    return is_owner(record, requester)
