from __future__ import annotations

import hashlib
import logging
import re
import time
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import httpx

from config import settings

from .gateway import ImageStoreError, UploadedImage

logger = logging.getLogger(__name__)

# .../upload/<transformations>/v1234567890/<folder>/<name>.<ext>
_PUBLIC_ID_PATTERN = re.compile(r"/v\d+/(.+?)(?:\.[^./]+)?$")


def extract_public_id(
    url: str,
    delivery_host: str = settings.CLOUDINARY_DELIVERY_HOST,
    cloud_name: Optional[str] = settings.CLOUDINARY_CLOUD_NAME,
) -> Optional[str]:
    """Return the folder-qualified public id of a Cloudinary delivery URL.

    Only URLs served from ``delivery_host`` for our own ``cloud_name`` and
    carrying a version segment are ours to delete; anything else yields
    ``None``.
    """
    if not url or not cloud_name:
        return None
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or parts.netloc.lower() != delivery_host.lower():
        return None
    if not parts.path.startswith(f"/{cloud_name}/"):
        return None
    match = _PUBLIC_ID_PATTERN.search(parts.path)
    if not match or not match.group(1):
        return None
    return match.group(1)


def sign_params(params: Mapping[str, Any], api_secret: str) -> str:
    """Cloudinary request signature: sha1 over the sorted ``key=value`` pairs plus the secret."""
    to_sign = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryImageStore:
    """Client for the Cloudinary upload API."""

    def __init__(
        self,
        *,
        cloud_name: Optional[str] = settings.CLOUDINARY_CLOUD_NAME,
        api_key: Optional[str] = settings.CLOUDINARY_API_KEY,
        api_secret: Optional[str] = settings.CLOUDINARY_API_SECRET,
        folder: str = settings.CLOUDINARY_FOLDER,
        transformation: str = settings.CLOUDINARY_TRANSFORMATION,
        base_url: str = settings.CLOUDINARY_API_BASE_URL,
        delivery_host: str = settings.CLOUDINARY_DELIVERY_HOST,
        timeout: float = settings.CLOUDINARY_UPLOAD_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._transformation = transformation
        self._base_url = base_url.rstrip("/")
        self._delivery_host = delivery_host
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    async def upload(self, data: bytes, *, filename: str, content_type: str) -> UploadedImage:
        params = {
            "folder": self._folder,
            "timestamp": int(time.time()),
            "transformation": self._transformation,
        }
        payload = await self._post(
            "image/upload",
            params,
            files={"file": (filename, data, content_type)},
        )

        secure_url = payload.get("secure_url")
        public_id = payload.get("public_id")
        if not secure_url or not public_id:
            raise ImageStoreError("Image store response did not include a URL")

        return UploadedImage(
            url=secure_url,
            public_id=public_id,
            width=payload.get("width"),
            height=payload.get("height"),
            format=payload.get("format"),
            bytes=payload.get("bytes"),
        )

    async def destroy(self, public_id: str) -> None:
        params = {"public_id": public_id, "timestamp": int(time.time())}
        payload = await self._post("image/destroy", params)
        result = payload.get("result")
        if result not in {"ok", "not found"}:
            raise ImageStoreError(f"Unexpected destroy result for {public_id}: {result}")
        if result == "not found":
            logger.info("Image %s was already absent from the store", public_id)

    def extract_public_id(self, url: str) -> Optional[str]:
        return extract_public_id(url, self._delivery_host, self._cloud_name)

    async def _post(
        self,
        action: str,
        params: dict[str, Any],
        *,
        files: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        if not self.configured:
            raise ImageStoreError("Cloudinary credentials are not configured")

        form = dict(params)
        form["api_key"] = self._api_key
        form["signature"] = sign_params(params, self._api_secret)
        url = f"{self._base_url}/{self._cloud_name}/{action}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, data=form, files=files)
        except httpx.HTTPError as exc:
            raise ImageStoreError(f"Image store request failed: {exc}") from exc

        if response.status_code >= 400:
            message = _error_message(response)
            raise ImageStoreError(f"Image store rejected {action} ({response.status_code}): {message}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ImageStoreError(f"Image store returned a non-JSON {action} response") from exc
        if not isinstance(payload, dict):
            raise ImageStoreError(f"Image store returned an unexpected {action} response")
        return payload


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message") or response.text
    except ValueError:
        return response.text
