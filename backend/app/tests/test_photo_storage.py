"""
Test suite for device photo storage
"""

import pytest

from app.domains.device.adapters.photo_storage import (
    InMemoryDevicePhotoRepository,
    LocalDevicePhotoRepository,
    guess_photo_extension,
)
from app.domains.device.exceptions import DeviceValidationError

from conftest import PNG_BYTES


@pytest.mark.parametrize(
    "photo, extension",
    [
        (PNG_BYTES, ".png"),
        (b"\xff\xd8\xff\xe0rest", ".jpg"),
        (b"GIF89a....", ".gif"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", ".webp"),
        (b"plain bytes", ".bin"),
    ],
)
def test_guess_photo_extension(photo, extension):
    assert guess_photo_extension(photo) == extension


async def test_local_repository_writes_file(tmp_path):
    repository = LocalDevicePhotoRepository(
        photo_dir=tmp_path / "photos", url_prefix="http://cdn.test/photos/"
    )

    url = await repository.save_photo(PNG_BYTES, "dev-1")

    assert url == "http://cdn.test/photos/dev-1.png"
    assert (tmp_path / "photos" / "dev-1.png").read_bytes() == PNG_BYTES


async def test_local_repository_rejects_empty_photo(tmp_path):
    repository = LocalDevicePhotoRepository(photo_dir=tmp_path)

    with pytest.raises(DeviceValidationError):
        await repository.save_photo(b"", "dev-1")

    assert list(tmp_path.iterdir()) == []


async def test_in_memory_repository_keeps_photo():
    repository = InMemoryDevicePhotoRepository()

    url = await repository.save_photo(PNG_BYTES, "dev-1")

    assert url == "memory://photos/dev-1.png"
    assert repository.photos == {"dev-1": PNG_BYTES}
