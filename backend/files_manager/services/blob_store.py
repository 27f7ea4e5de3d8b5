"""Blob storage on the local filesystem.

Every write lands in a temporary sibling first and is published with an
atomic rename, so a reader sees either the previous content or the new
content, never a partial file.
"""
import logging
import uuid
from pathlib import Path
from typing import AsyncIterator

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BlobStore:
    """Reads and writes raw bytes under a root directory."""

    def __init__(self, root: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def generate_path(self) -> str:
        """A fresh, collision-free path for a new blob."""
        return str(self.root / str(uuid.uuid4()))

    @staticmethod
    def derivative_path(local_path: str, width: int) -> str:
        return f"{local_path}_{width}"

    async def write(self, path: str, data: bytes) -> None:
        target = Path(path)
        await aiofiles.os.makedirs(target.parent, exist_ok=True)
        tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, target)
        except Exception:
            logger.exception(f"Failed to write blob {path}")
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise

    async def read(self, path: str) -> AsyncIterator[bytes]:
        """Stream a blob in chunks."""
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def read_bytes(self, path: str) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.isfile(path)
