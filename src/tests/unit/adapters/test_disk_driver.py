"""Unit tests for DiskDriver."""

import os
import stat

import pytest

from storehub.adapters.storage.disk import DiskDriver


@pytest.fixture
def disk_driver(tmp_path) -> DiskDriver:
    return DiskDriver(
        storage_root_dir=str(tmp_path / "store"),
        read_url_prefix="https://read.test/",
        page_size=2,
    )


class TestBackendName:

    def test_returns_disk(self, disk_driver: DiskDriver) -> None:
        assert disk_driver.backend_name == "disk"


class TestStore:

    async def test_writes_file(self, disk_driver, tmp_path, body) -> None:
        url = await disk_driver.store(
            "abc123", "photos/avatar.png", body(b"ab", b"cd"), "image/png"
        )

        target = tmp_path / "store" / "abc123" / "photos" / "avatar.png"
        assert target.read_bytes() == b"abcd"
        assert url == "https://read.test/abc123/photos/avatar.png"

    async def test_overwrites_existing_file(self, disk_driver, tmp_path, body) -> None:
        await disk_driver.store("abc123", "a.txt", body(b"old"), "text/plain")
        await disk_driver.store("abc123", "a.txt", body(b"new"), "text/plain")

        assert (tmp_path / "store" / "abc123" / "a.txt").read_bytes() == b"new"

    async def test_failed_stream_leaves_no_partial_state(
        self, disk_driver, tmp_path
    ) -> None:
        await disk_driver.start()

        async def broken():
            yield b"partial"
            raise ConnectionResetError("client went away")

        with pytest.raises(ConnectionResetError):
            await disk_driver.store("abc123", "a.txt", broken(), "text/plain")

        namespace_dir = tmp_path / "store" / "abc123"
        assert os.listdir(namespace_dir) == []

    async def test_failed_overwrite_keeps_previous_object(
        self, disk_driver, tmp_path, body
    ) -> None:
        await disk_driver.store("abc123", "a.txt", body(b"old"), "text/plain")

        async def broken():
            yield b"new-but-incomplete"
            raise ConnectionResetError()

        with pytest.raises(ConnectionResetError):
            await disk_driver.store("abc123", "a.txt", broken(), "text/plain")

        assert (tmp_path / "store" / "abc123" / "a.txt").read_bytes() == b"old"

    async def test_stored_file_is_world_readable(self, tmp_path, body) -> None:
        previous = os.umask(0o022)
        try:
            driver = DiskDriver(str(tmp_path / "store"), "https://read.test/")
        finally:
            os.umask(previous)

        await driver.store("abc123", "photos/avatar.png", body(b"x"), "image/png")

        target = tmp_path / "store" / "abc123" / "photos" / "avatar.png"
        mode = stat.S_IMODE(target.stat().st_mode)
        assert mode == 0o644
        assert mode & stat.S_IROTH


class TestListFiles:

    async def test_empty_namespace(self, disk_driver) -> None:
        result = await disk_driver.list_files("nobody", None)
        assert result.entries == []
        assert result.page is None

    async def test_lists_nested_paths_in_order(self, disk_driver, body) -> None:
        for path in ["z.txt", "a/b.txt", "a/a.txt"]:
            await disk_driver.store("abc123", path, body(b"x"), "text/plain")

        first = await disk_driver.list_files("abc123", None)
        second = await disk_driver.list_files("abc123", first.page)

        assert first.entries == ["a/a.txt", "a/b.txt"]
        assert second.entries == ["z.txt"]
        assert second.page is None

    async def test_skips_in_flight_uploads(self, disk_driver, tmp_path, body) -> None:
        await disk_driver.store("abc123", "done.txt", body(b"x"), "text/plain")
        (tmp_path / "store" / "abc123" / ".storehub-upload-123").write_bytes(b"x")

        result = await disk_driver.list_files("abc123", None)
        assert result.entries == ["done.txt"]


class TestStart:

    async def test_creates_root(self, disk_driver, tmp_path) -> None:
        await disk_driver.start()
        assert (tmp_path / "store").is_dir()
