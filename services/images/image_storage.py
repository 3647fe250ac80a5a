from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import anyio

from config import settings
from infrastructure.image_store import ImageStoreError, ImageStoreGateway, UploadedImage
from services.errors import BadRequestError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImageFile:
    """An image payload received from a client, before it reaches the store."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ImageStorageService:
    """Validates image payloads and applies the batch policy on top of the raw store."""

    def __init__(
        self,
        store: ImageStoreGateway,
        *,
        allowed_mime_types: Iterable[str] = settings.ALLOWED_IMAGE_MIME_TYPES,
        max_size_bytes: int = settings.MAX_IMAGE_SIZE_BYTES,
        max_files: int = settings.MAX_IMAGES_PER_PRODUCT,
    ) -> None:
        self.store = store
        self.allowed_mime_types = frozenset(allowed_mime_types)
        self.max_size_bytes = max_size_bytes
        self.max_files = max_files

    def validate(self, file: Optional[ImageFile]) -> None:
        if file is None or not file.data:
            raise BadRequestError("No file provided")
        if file.content_type not in self.allowed_mime_types:
            raise BadRequestError("Only JPEG, PNG, WebP, and GIF images are allowed")
        if file.size > self.max_size_bytes:
            limit_mb = self.max_size_bytes // (1024 * 1024)
            raise BadRequestError(f"File size must be less than {limit_mb}MB")

    async def upload(self, file: Optional[ImageFile]) -> str:
        self.validate(file)
        try:
            uploaded = await self.store.upload(
                file.data,
                filename=file.filename,
                content_type=file.content_type,
            )
        except ImageStoreError as exc:
            logger.error("Image upload failed for %s: %s", file.filename, exc)
            raise BadRequestError("Failed to upload image") from exc
        return uploaded.url

    async def upload_many(self, files: Sequence[ImageFile]) -> List[str]:
        """Upload a batch concurrently; any failure fails the whole batch."""
        if not files:
            raise BadRequestError("No files provided")
        if len(files) > self.max_files:
            raise BadRequestError(f"Maximum {self.max_files} images allowed")

        for file in files:
            self.validate(file)

        logger.info("Uploading %d image(s)", len(files))
        uploaded: List[Optional[UploadedImage]] = [None] * len(files)
        failures: List[ImageStoreError] = []

        async def _upload(index: int, file: ImageFile, scope: anyio.CancelScope) -> None:
            try:
                uploaded[index] = await self.store.upload(
                    file.data,
                    filename=file.filename,
                    content_type=file.content_type,
                )
            except ImageStoreError as exc:
                failures.append(exc)
                scope.cancel()

        async with anyio.create_task_group() as tg:
            for index, file in enumerate(files):
                tg.start_soon(_upload, index, file, tg.cancel_scope)

        if failures:
            logger.error("Batch image upload failed: %s", failures[0])
            await self._discard([image for image in uploaded if image is not None])
            raise BadRequestError("Failed to upload images") from failures[0]
        return [image.url for image in uploaded]

    async def _discard(self, images: Sequence[UploadedImage]) -> None:
        # Images stored before the batch was aborted would otherwise be orphaned.
        results = await asyncio.gather(
            *(self.store.destroy(image.public_id) for image in images),
            return_exceptions=True,
        )
        for image, result in zip(images, results):
            if isinstance(result, Exception):
                logger.warning("Failed to discard uploaded image %s: %s", image.public_id, result)

    async def delete(self, public_id: str) -> None:
        await self.store.destroy(public_id)

    def extract_public_id(self, url: str) -> Optional[str]:
        return self.store.extract_public_id(url)
