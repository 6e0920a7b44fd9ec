"""
Unit tests for FileImageStorage and image helpers.
"""
import pytest

from cookscan.domain.exceptions import ImageUploadError
from cookscan.domain.value_objects.captured_image import CapturedImage
from cookscan.infrastructure.images.file_image_storage import FileImageStorage
from cookscan.infrastructure.images.image_processor import extension_for_mime, image_to_data_url


class TestFileImageStorage:
    @pytest.mark.asyncio
    async def test_upload_writes_file_and_returns_relative_ref(self, tmp_path):
        storage = FileImageStorage(tmp_path)

        ref = await storage.upload_image(b"\x89PNG-bytes", "image/png")

        assert ref.startswith("images/")
        assert ref.endswith(".png")
        assert storage.resolve(ref).read_bytes() == b"\x89PNG-bytes"

    @pytest.mark.asyncio
    async def test_each_upload_gets_a_new_ref(self, tmp_path):
        storage = FileImageStorage(tmp_path)
        first = await storage.upload_image(b"a", "image/jpeg")
        second = await storage.upload_image(b"a", "image/jpeg")
        assert first != second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data, mime", [(b"", "image/jpeg"), (b"abc", "text/plain")])
    async def test_invalid_uploads_are_rejected(self, tmp_path, data, mime):
        with pytest.raises(ImageUploadError):
            await FileImageStorage(tmp_path).upload_image(data, mime)

    def test_resolve_rejects_paths_outside_storage(self, tmp_path):
        with pytest.raises(ImageUploadError):
            FileImageStorage(tmp_path).resolve("../secrets.txt")


class TestImageProcessor:
    def test_data_url(self):
        image = CapturedImage(data=b"abc", mime_type="image/png")
        assert image_to_data_url(image) == "data:image/png;base64,YWJj"

    @pytest.mark.parametrize(
        "mime, extension",
        [("image/jpeg", ".jpg"), ("IMAGE/PNG", ".png"), ("image/x-unknown-format", ".img")],
    )
    def test_extension_for_mime(self, mime, extension):
        assert extension_for_mime(mime) == extension
