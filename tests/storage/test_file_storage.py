"""Tests for file-backed storage."""

import pytest

from idlecore.storage import FileStorage, Storage


@pytest.mark.asyncio
async def test_write_read_clear(tmp_path) -> None:
    storage = FileStorage(tmp_path / "saves")
    assert isinstance(storage, Storage)

    assert await storage.read("Settings") is None
    assert await storage.write("Settings", {"count": "1"})
    assert (tmp_path / "saves" / "Settings.json").exists()
    assert await storage.read("Settings") == {"count": "1"}

    await storage.clear()
    assert await storage.read("Settings") is None


@pytest.mark.asyncio
async def test_pretty_files_are_plain_json(tmp_path) -> None:
    storage = FileStorage(tmp_path)
    await storage.write("Settings", {"count": "1"}, pretty=True)

    assert (tmp_path / "Settings.json").read_text(encoding="utf-8").startswith("{")
    assert await storage.read("Settings") == {"count": "1"}


@pytest.mark.asyncio
async def test_clear_on_missing_directory(tmp_path) -> None:
    await FileStorage(tmp_path / "missing").clear()


@pytest.mark.parametrize("key", ["", "../escape", "a/b", ".."])
def test_invalid_keys_rejected(tmp_path, key) -> None:
    with pytest.raises(ValueError):
        FileStorage(tmp_path).path_for(key)
