from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class ImageStoreError(Exception):
    """Raised when the hosted image store rejects or fails a request."""


@dataclass(slots=True)
class UploadedImage:
    """Result of a successful upload to the hosted image store."""

    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    bytes: Optional[int] = None


class ImageStoreGateway(Protocol):
    """Abstraction over hosted image storage backends."""

    async def upload(self, data: bytes, *, filename: str, content_type: str) -> UploadedImage:
        """Store the payload and return its durable public URL."""

    async def destroy(self, public_id: str) -> None:
        """Remove a previously uploaded image."""

    def extract_public_id(self, url: str) -> Optional[str]:
        """Map a delivery URL back to the store identifier, or ``None`` if foreign."""
