"""
Brainboard Backend: Image Upload Gateway
========================================

What:  Validates uploaded images and stores them through ObjectStorage.
How:   Extension and size checks run first; the file is then written under a
       key namespaced by purpose and board id. The gateway only returns a URL;
       attaching that URL to an image card is a separate card operation.

Validation order:
    1. Non-empty file
    2. Extension in ALLOWED_EXTENSIONS
    3. Size <= settings.max_upload_size
    4. Store (any backend failure is fatal to the request: 500)

Filenames never reach the key except for their extension; the rest of the key
is the board id plus a UUID, so uploaded names cannot traverse paths.
"""

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

from brainboard.exceptions import InvalidInputError
from brainboard.services.object_storage import ObjectStorage

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

IMAGE_PREFIX = "images/"
THUMBNAIL_PREFIX = "thumbnails/"


class ImageUploadGateway:
    """
    Stores card images and board thumbnails.

    Attributes:
        storage:   ObjectStorage backend that receives the bytes
        max_size:  Upper bound on upload size in bytes
    """

    def __init__(self, storage: ObjectStorage, max_size: int):
        self.storage = storage
        self.max_size = max_size

    def validate_extension(self, filename: Optional[str]) -> str:
        """Returns the lower-cased extension (with dot) or raises InvalidInputError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidInputError(
                message=(
                    f"File type '{ext or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise InvalidInputError(message="Uploaded file is empty", field="file")
        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise InvalidInputError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size": self.max_size, "actual_size": size},
            )

    def _validate(self, filename: Optional[str], content: bytes) -> str:
        self.validate_size(len(content))
        return self.validate_extension(filename)

    @staticmethod
    def _content_type(ext: str, declared: Optional[str]) -> Optional[str]:
        if declared and declared.startswith("image/"):
            return declared
        return mimetypes.types_map.get(ext)

    async def upload_image(
        self,
        board_id: int,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Stores a card image under images/{board_id}/{uuid}{ext} and returns its URL.

        Raises:
            InvalidInputError: empty, oversized or non-image file
            ObjectStorageError: the backend write failed
        """
        ext = self._validate(filename, content)
        key = f"{IMAGE_PREFIX}{board_id}/{uuid.uuid4()}{ext}"
        url = await self.storage.put(key, content, self._content_type(ext, content_type))
        logger.info("Image uploaded for board %d: %s", board_id, key)
        return url

    async def upload_thumbnail(
        self,
        board_id: int,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Stores a board thumbnail under thumbnails/{board_id}{ext} and returns its URL."""
        ext = self._validate(filename, content)
        key = f"{THUMBNAIL_PREFIX}{board_id}{ext}"
        url = await self.storage.put(key, content, self._content_type(ext, content_type))
        logger.info("Thumbnail uploaded for board %d: %s", board_id, key)
        return url
