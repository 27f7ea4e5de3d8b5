"""Tests for the filesystem blob store."""
import os

import pytest

from conftest import read_all
from files_manager.services.blob_store import CHUNK_SIZE, BlobStore


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(str(tmp_path / "blobs"))


async def test_write_then_read(blob_store):
    path = blob_store.generate_path()
    content = os.urandom(CHUNK_SIZE * 2 + 17)

    await blob_store.write(path, content)

    assert await blob_store.exists(path)
    assert await read_all(blob_store.read(path)) == content
    assert await blob_store.read_bytes(path) == content


async def test_generated_paths_are_unique_and_under_root(blob_store):
    paths = {blob_store.generate_path() for _ in range(50)}

    assert len(paths) == 50
    assert all(p.startswith(str(blob_store.root)) for p in paths)


async def test_missing_blob_does_not_exist(blob_store):
    assert not await blob_store.exists(blob_store.generate_path())


async def test_overwrite_leaves_no_temp_files(blob_store):
    path = blob_store.generate_path()

    await blob_store.write(path, b"first")
    await blob_store.write(path, b"second")

    assert await blob_store.read_bytes(path) == b"second"
    assert os.listdir(blob_store.root) == [os.path.basename(path)]


def test_derivative_path():
    assert BlobStore.derivative_path("/tmp/files/abc", 250) == "/tmp/files/abc_250"
