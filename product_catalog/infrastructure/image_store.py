"""Image storage for category images.

The service only depends on the ``ImageStore`` protocol: upload returns
a public URL plus an opaque id, and the id is all that is needed to
delete the image later. ``LocalImageStore`` keeps files on disk.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import uuid4

import structlog

from product_catalog.domain.exceptions import ImageStoreError
from product_catalog.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoredImage:
    """Location of an uploaded image.

    Attributes:
        url: Public URL of the image.
        image_id: Opaque id used to delete the image.
    """

    url: str
    image_id: str


class ImageStore(Protocol):
    """Storage backend for category images."""

    def upload(self, data: bytes, filename: str) -> StoredImage:
        """Store image bytes and return where they live."""
        ...

    def delete(self, image_id: str) -> bool:
        """Delete an image. Returns False if nothing was deleted."""
        ...


class LocalImageStore:
    """Image store writing files into a local directory.

    Example usage:
        store = LocalImageStore()
        image = store.upload(b"...", "shoes.png")
        store.delete(image.image_id)
    """

    ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg"}

    def __init__(self, root: str | Path | None = None, base_url: str | None = None) -> None:
        """Initialize store.

        Args:
            root: Directory for stored files. Defaults to settings.
            base_url: URL prefix for stored files. Defaults to settings.
        """
        self.root = Path(root or settings.image_storage_dir)
        self.base_url = (base_url or settings.image_base_url).rstrip("/")

    def upload(self, data: bytes, filename: str) -> StoredImage:
        """Write image bytes under a generated name.

        Args:
            data: Raw image bytes.
            filename: Original file name, used for its extension.

        Returns:
            StoredImage with URL and generated id.

        Raises:
            ImageStoreError: If the file is empty, has an unsupported
                extension or cannot be written.
        """
        if not data:
            raise ImageStoreError("Image is empty", details={"filename": filename})

        extension = Path(filename).suffix.lower()
        if extension not in self.ALLOWED_EXTENSIONS:
            raise ImageStoreError(
                f"Unsupported image type '{extension or filename}'",
                details={"filename": filename},
            )

        image_id = f"{uuid4().hex}{extension}"
        path = self.root / image_id
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("Failed to store image", path=str(path), error=str(e))
            raise ImageStoreError(
                f"Failed to store image: {e}",
                details={"filename": filename},
            ) from e

        logger.info("Image stored", image_id=image_id, size=len(data))
        return StoredImage(url=f"{self.base_url}/{image_id}", image_id=image_id)

    def delete(self, image_id: str) -> bool:
        """Delete a stored image.

        Args:
            image_id: Id returned by upload.

        Returns:
            True if the file existed and was removed.
        """
        path = self.root / image_id
        # ids are bare file names; anything else is not ours
        if path.parent != self.root or not path.is_file():
            return False

        try:
            path.unlink()
        except OSError as e:
            logger.warning("Failed to delete image", image_id=image_id, error=str(e))
            return False
        return True
