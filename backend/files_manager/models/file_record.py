"""FileRecord model - file and folder metadata (bytes live in the blob store)."""
import uuid
from typing import Optional

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from files_manager.models.base import Base, OwnerMixin, TimestampMixin
from files_manager.types import FileType, ParentRef, parent_ref_from_column


class FileRecord(Base, TimestampMixin, OwnerMixin):
    __tablename__ = "files"
    __table_args__ = (
        # Listing filters on (owner, parent)
        Index("files_user_parent_idx", "user_id", "parent_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # NULL means the root of the owner's tree
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    # Only set for files and images
    local_path: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    @property
    def parent(self) -> ParentRef:
        return parent_ref_from_column(self.parent_id)

    @property
    def is_folder(self) -> bool:
        return self.type == FileType.FOLDER.value
