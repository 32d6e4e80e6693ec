"""Tests for StorageClient."""

import json
import logging

import pytest

from blob_core.backends.memory import InMemoryBlobStorage
from blob_core.cancellation import CancellationToken
from blob_core.client import StorageClient
from blob_core.exceptions import InvalidPathError, OperationCancelledError
from blob_core.observability import (
    StructuredFormatter,
    register_metric_callback,
    unregister_metric_callback,
)
from blob_core.transactions import EmptyTransaction


@pytest.fixture
def client(storage):
    """Client over an empty in-memory storage."""
    return StorageClient(storage, name="test-storage")


@pytest.fixture
def metrics():
    """Collect emitted metrics for the duration of a test."""
    events: list[tuple] = []

    def callback(name: str, value: float, labels: dict) -> None:
        events.append((name, value, labels))

    register_metric_callback(callback)
    yield events
    unregister_metric_callback(callback)


class TestReadWrite:
    """Tests for reading and writing through the client."""

    @pytest.mark.asyncio
    async def test_bytes_round_trip(self, client):
        """Test writing and reading bytes."""
        await client.write_bytes("/a/b.bin", b"\x00\x01")
        assert await client.read_bytes("/a/b.bin") == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_text_with_encoding(self, client):
        """Test text is encoded and decoded with the given encoding."""
        await client.write_text("/t.txt", "héllo", encoding="latin-1")
        assert await client.read_bytes("/t.txt") == "héllo".encode("latin-1")
        assert await client.read_text("/t.txt", encoding="latin-1") == "héllo"

    @pytest.mark.asyncio
    async def test_read_missing_returns_none(self, client):
        """Test reading a missing blob returns None."""
        assert await client.read_bytes("/missing") is None
        assert await client.read_text("/missing") is None

    @pytest.mark.asyncio
    async def test_append(self, client):
        """Test append helpers add to existing content."""
        await client.append_text("/log.txt", "one\n")
        await client.append_text("/log.txt", "two\n")
        await client.append_bytes("/log.txt", b"three\n")
        assert await client.read_text("/log.txt") == "one\ntwo\nthree\n"

    @pytest.mark.asyncio
    async def test_open_write_passthrough(self, client):
        """Test streams opened through the client commit to the backend."""
        async with await client.open_write("/s.txt") as stream:
            stream.write(b"streamed")
        reader = await client.open_read("/s.txt")
        assert reader.read() == b"streamed"

    @pytest.mark.asyncio
    async def test_open_transaction(self, client):
        """Test transactions come from the backend."""
        assert await client.open_transaction() is EmptyTransaction.instance

        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            await client.open_transaction(cancellation=token)

    @pytest.mark.asyncio
    async def test_invalid_path_propagates(self, client):
        """Test validation errors reach the caller."""
        with pytest.raises(InvalidPathError):
            await client.write_bytes("/folder/", b"x")

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, client):
        """Test a fired token aborts client calls."""
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            await client.write_text("/a.txt", "x", cancellation=token)
        assert not await client.exists("/a.txt")


class TestSingleBlobHelpers:
    """Tests for single-id helpers."""

    @pytest.mark.asyncio
    async def test_exists_and_get_blob(self, client):
        """Test existence and metadata of one blob."""
        await client.write_bytes("/f.txt", b"hello")

        assert await client.exists("/f.txt")
        assert not await client.exists("/g.txt")
        blob = await client.get_blob("/f.txt")
        assert blob.size == 5
        assert await client.get_blob("/g.txt") is None

    @pytest.mark.asyncio
    async def test_delete_single_and_batch(self, client):
        """Test delete accepts one id or many."""
        for name in ("a", "b", "c"):
            await client.write_bytes(f"/{name}", b"x")

        await client.delete("/a")
        await client.delete(["/b", "/c", "/missing"])
        assert await client.list_files(recurse=True) == []


class TestFolderOperations:
    """Tests for listing and folder helpers."""

    @pytest.mark.asyncio
    async def test_list_files_with_options(self, client):
        """Test ListOptions fields pass through as keyword arguments."""
        for path in ("/docs/a.md", "/docs/b.txt", "/docs/sub/c.md"):
            await client.write_bytes(path, b"x")

        direct = await client.list_files("/docs")
        assert {b.name for b in direct} == {"a.md", "b.txt"}

        markdown = await client.list_files(
            "/docs", recurse=True, is_match=lambda b: b.name.endswith(".md")
        )
        assert {b.full_path for b in markdown} == {"/docs/a.md", "/docs/sub/c.md"}

        limited = await client.list_files("/docs", recurse=True, max_results=1)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_delete_folder(self, client):
        """Test deleting a folder removes everything below it only."""
        for path in ("/tmp/a", "/tmp/x/b", "/tmpfile", "/keep/c"):
            await client.write_bytes(path, b"x")

        assert await client.delete_folder("/tmp") == 2
        remaining = await client.list_files(recurse=True)
        assert {b.full_path for b in remaining} == {"/tmpfile", "/keep/c"}

    @pytest.mark.asyncio
    async def test_delete_empty_folder(self, client):
        """Test deleting a missing folder deletes nothing."""
        assert await client.delete_folder("/nothing") == 0


class TestCopyRename:
    """Tests for copy and rename."""

    @pytest.mark.asyncio
    async def test_copy(self, client):
        """Test copy keeps the source and creates the target."""
        await client.write_bytes("/src.txt", b"payload")

        assert await client.copy("/src.txt", "/dst/copy.txt")
        assert await client.read_bytes("/src.txt") == b"payload"
        assert await client.read_bytes("/dst/copy.txt") == b"payload"

    @pytest.mark.asyncio
    async def test_copy_to_other_storage(self, client):
        """Test copy into a separate storage."""
        other = InMemoryBlobStorage()
        await client.write_bytes("/src.txt", b"payload")

        assert await client.copy("/src.txt", "/src.txt", target_storage=other)
        assert await StorageClient(other).read_bytes("/src.txt") == b"payload"

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, client):
        """Test copying a missing blob returns False."""
        assert not await client.copy("/missing", "/dst")
        assert not await client.exists("/dst")

    @pytest.mark.asyncio
    async def test_rename(self, client):
        """Test rename moves the blob."""
        await client.write_bytes("/old.txt", b"data")

        assert await client.rename("/old.txt", "/new.txt")
        assert not await client.exists("/old.txt")
        assert await client.read_bytes("/new.txt") == b"data"

    @pytest.mark.asyncio
    async def test_rename_to_same_path_keeps_blob(self, client):
        """Test renaming onto the same normalized path does not delete it."""
        await client.write_bytes("/same.txt", b"data")

        assert await client.rename("/same.txt", "same.txt")
        assert await client.read_bytes("/same.txt") == b"data"

    @pytest.mark.asyncio
    async def test_rename_missing(self, client):
        """Test renaming a missing blob returns False."""
        assert not await client.rename("/missing", "/other")


class TestInstrumentation:
    """Tests for client metrics."""

    @pytest.mark.asyncio
    async def test_timer_metric_with_storage_name(self, client, metrics):
        """Test each call emits a timer labelled with the storage name."""
        await client.write_bytes("/f.txt", b"x")

        name, value, labels = metrics[-1]
        assert name == "blob.write"
        assert value >= 0
        assert labels == {"operation": "write", "storage_name": "test-storage"}

    @pytest.mark.asyncio
    async def test_append_metric_name(self, client, metrics):
        """Test appends are reported separately from writes."""
        await client.append_bytes("/f.txt", b"x")
        assert metrics[-1][0] == "blob.append"

    @pytest.mark.asyncio
    async def test_failed_call_emits_error_counter(self, client, metrics):
        """Test failures are counted and re-raised without a timer."""
        with pytest.raises(InvalidPathError):
            await client.read_bytes("/")

        assert [name for name, _, _ in metrics] == ["blob.read.errors"]
        assert metrics[0][2] == {
            "error": "InvalidPathError",
            "operation": "read",
            "storage_name": "test-storage",
        }

    @pytest.mark.asyncio
    async def test_byte_counts(self, client, metrics):
        """Test reads and writes report the number of bytes moved."""
        await client.write_bytes("/f.txt", b"hello")
        await client.read_bytes("/f.txt")

        sizes = {name: value for name, value, _ in metrics if name.startswith("blob.bytes_")}
        assert sizes == {"blob.bytes_written": 5.0, "blob.bytes_read": 5.0}

    @pytest.mark.asyncio
    async def test_operation_log_carries_path(self, client, caplog):
        """Test each call logs its completion with the storage and path attached."""
        with caplog.at_level(logging.DEBUG, logger="blob_core"):
            await client.write_bytes("/f.txt", b"x")

        [record] = [r for r in caplog.records if r.getMessage() == "Blob write completed"]
        formatted = json.loads(StructuredFormatter().format(record))
        assert formatted["context"]["operation"] == "write"
        assert formatted["context"]["storage_name"] == "test-storage"
        assert formatted["context"]["path"] == "/f.txt"
        assert formatted["duration_ms"] >= 0
