"""Tests for the local image store."""

import pytest

from product_catalog.domain.exceptions import ImageStoreError
from product_catalog.infrastructure.image_store import LocalImageStore


@pytest.fixture
def store(tmp_path) -> LocalImageStore:
    return LocalImageStore(root=tmp_path / "images", base_url="https://cdn.test/categories/")


class TestUpload:
    """Tests for LocalImageStore.upload."""

    def test_upload_writes_file(self, store: LocalImageStore) -> None:
        """Bytes are written under a generated name."""
        image = store.upload(b"\x89PNG", "Shoes.PNG")

        assert image.image_id.endswith(".png")
        assert image.url == f"https://cdn.test/categories/{image.image_id}"
        assert (store.root / image.image_id).read_bytes() == b"\x89PNG"

    def test_upload_generates_unique_ids(self, store: LocalImageStore) -> None:
        """Two uploads of the same file do not collide."""
        first = store.upload(b"a", "a.jpg")
        second = store.upload(b"a", "a.jpg")

        assert first.image_id != second.image_id

    def test_empty_image(self, store: LocalImageStore) -> None:
        """Empty data is rejected."""
        with pytest.raises(ImageStoreError):
            store.upload(b"", "a.png")

    def test_unsupported_extension(self, store: LocalImageStore) -> None:
        """Only image extensions are accepted."""
        with pytest.raises(ImageStoreError) as exc_info:
            store.upload(b"data", "script.sh")
        assert exc_info.value.code == "IMAGE_STORE_ERROR"


class TestDelete:
    """Tests for LocalImageStore.delete."""

    def test_delete(self, store: LocalImageStore) -> None:
        """Stored files are removed."""
        image = store.upload(b"a", "a.png")

        assert store.delete(image.image_id) is True
        assert not (store.root / image.image_id).exists()

    def test_delete_missing(self, store: LocalImageStore) -> None:
        """Unknown ids report failure."""
        assert store.delete("nope.png") is False

    def test_delete_outside_root(self, store: LocalImageStore, tmp_path) -> None:
        """Ids with path components are refused."""
        outside = tmp_path / "keep.png"
        outside.write_bytes(b"x")

        assert store.delete("../keep.png") is False
        assert outside.exists()
