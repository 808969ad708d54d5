"""
Media host client: forwards uploaded files to a Cloudinary-style HTTP upload
endpoint and returns the hosted URL.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class MediaUploadError(Exception):
    """Raised when the media host is unconfigured, unreachable or rejects a file."""


@dataclass(frozen=True)
class MediaAsset:
    url: str
    public_id: Optional[str] = None


class MediaHost:

    def __init__(
        self,
        upload_url: Optional[str],
        api_key: Optional[str] = None,
        upload_preset: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        self.upload_url = upload_url
        self.api_key = api_key
        self.upload_preset = upload_preset
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config) -> "MediaHost":
        return cls(
            upload_url=config.get("MEDIA_UPLOAD_URL") or None,
            api_key=config.get("MEDIA_API_KEY") or None,
            upload_preset=config.get("MEDIA_UPLOAD_PRESET") or None,
            timeout=float(config.get("MEDIA_TIMEOUT_SECONDS", DEFAULT_TIMEOUT)),
        )

    def _post(self, files, data) -> httpx.Response:
        if self._client is not None:
            return self._client.post(self.upload_url, files=files, data=data, timeout=self.timeout)
        return httpx.post(self.upload_url, files=files, data=data, timeout=self.timeout)

    def upload(self, file_obj: BinaryIO, filename: str) -> MediaAsset:
        """
        Upload one file. Raises MediaUploadError on network failure, a non-2xx
        response, or a response without a URL.
        """
        if not self.upload_url:
            raise MediaUploadError("Media host is not configured.")

        data = {}
        if self.upload_preset:
            data["upload_preset"] = self.upload_preset
        if self.api_key:
            data["api_key"] = self.api_key
        files = {"file": (filename or "upload", file_obj)}

        try:
            response = self._post(files, data)
        except httpx.HTTPError as exc:
            raise MediaUploadError("Unable to reach the media host.") from exc

        if response.status_code >= 400:
            logger.warning("Media host rejected %s with status %s", filename, response.status_code)
            raise MediaUploadError(f"Media host returned {response.status_code}.")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MediaUploadError("Invalid media host response.") from exc

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            raise MediaUploadError("Media host response has no URL.")
        return MediaAsset(url=url, public_id=payload.get("public_id"))
