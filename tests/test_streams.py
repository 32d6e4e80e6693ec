"""Tests for BlobWriteStream."""

import asyncio

import pytest

from blob_core.cancellation import CancellationToken
from blob_core.exceptions import OperationCancelledError
from blob_core.streams import BlobWriteStream, WriteState


class Recorder:
    """Commit callback that remembers what it received."""

    def __init__(self, fail: bool = False) -> None:
        self.commits: list[bytes] = []
        self.fail = fail

    async def __call__(self, data: bytes) -> None:
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("commit failed")
        self.commits.append(data)


class TestBlobWriteStream:
    """Tests for BlobWriteStream."""

    @pytest.mark.asyncio
    async def test_commits_concatenated_chunks_on_close(self):
        """Test chunks are buffered and committed together."""
        recorder = Recorder()
        stream = BlobWriteStream(recorder)
        assert stream.write(b"ab") == 2
        stream.writelines([b"c", b"de"])
        assert stream.tell() == 5
        assert recorder.commits == []

        await stream.close()
        assert recorder.commits == [b"abcde"]
        assert stream.state == WriteState.COMMITTED
        assert stream.closed

    @pytest.mark.asyncio
    async def test_zero_bytes_commits_empty(self):
        """Test an untouched stream still commits empty content."""
        recorder = Recorder()
        stream = BlobWriteStream(recorder)
        await stream.close()
        assert recorder.commits == [b""]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        """Test repeated close commits once."""
        recorder = Recorder()
        stream = BlobWriteStream(recorder)
        stream.write(b"x")
        await stream.close()
        await stream.close()
        assert recorder.commits == [b"x"]

    @pytest.mark.asyncio
    async def test_concurrent_close_commits_once(self):
        """Test closes racing each other share one commit."""
        recorder = Recorder()
        stream = BlobWriteStream(recorder)
        stream.write(b"x")
        await asyncio.gather(stream.close(), stream.close(), stream.close())
        assert recorder.commits == [b"x"]

    @pytest.mark.asyncio
    async def test_write_after_close_raises(self):
        """Test writing to a closed stream fails."""
        stream = BlobWriteStream(Recorder())
        await stream.close()
        assert not stream.writable()
        with pytest.raises(ValueError):
            stream.write(b"late")

    def test_write_str_raises(self):
        """Test text is rejected."""
        stream = BlobWriteStream(Recorder())
        with pytest.raises(TypeError):
            stream.write("text")

    @pytest.mark.asyncio
    async def test_context_manager_commits(self):
        """Test a clean async with block commits."""
        recorder = Recorder()
        async with BlobWriteStream(recorder) as stream:
            stream.write(b"data")
        assert recorder.commits == [b"data"]

    @pytest.mark.asyncio
    async def test_context_manager_discards_on_error(self):
        """Test an exception inside async with discards the buffer."""
        recorder = Recorder()
        with pytest.raises(KeyError):
            async with BlobWriteStream(recorder) as stream:
                stream.write(b"data")
                raise KeyError("boom")

        assert recorder.commits == []
        assert stream.state == WriteState.DISCARDED

    @pytest.mark.asyncio
    async def test_discard_then_close_commits_nothing(self):
        """Test close after discard is a no-op."""
        recorder = Recorder()
        stream = BlobWriteStream(recorder)
        stream.write(b"data")
        stream.discard()
        await stream.close()
        assert recorder.commits == []

    @pytest.mark.asyncio
    async def test_cancelled_token_discards(self):
        """Test a token fired before close discards and raises."""
        recorder = Recorder()
        token = CancellationToken()
        stream = BlobWriteStream(recorder, cancellation=token)
        stream.write(b"data")
        token.cancel()

        with pytest.raises(OperationCancelledError):
            await stream.close()
        assert recorder.commits == []
        assert stream.state == WriteState.DISCARDED

    @pytest.mark.asyncio
    async def test_failed_commit_marks_discarded(self):
        """Test a commit error propagates and leaves the stream discarded."""
        stream = BlobWriteStream(Recorder(fail=True))
        stream.write(b"data")
        with pytest.raises(RuntimeError):
            await stream.close()
        assert stream.state == WriteState.DISCARDED
