from __future__ import annotations

import os
from typing import Optional

import requests

from ..utils.logging import get_logger

logger = get_logger("dd.output.cloudinary")

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class UploadError(RuntimeError):
    """The image host rejected the upload or returned no URL."""


class CloudinaryUploader:
    """Unsigned uploads through a Cloudinary upload preset.

    The preset must be configured for unsigned uploads in the Cloudinary
    console; no API secret is needed on this side.
    """

    def __init__(
        self,
        *,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
        folder: Optional[str] = None,
        dry_run: bool = False,
        timeout: int = 60,
    ) -> None:
        self.cloud_name = cloud_name or os.environ.get("CLOUDINARY_CLOUD_NAME")
        self.upload_preset = upload_preset or os.environ.get("CLOUDINARY_UPLOAD_PRESET")
        self.folder = folder
        self.dry_run = dry_run
        self.timeout = timeout
        if not dry_run and not (self.cloud_name and self.upload_preset):
            raise RuntimeError("CLOUDINARY_CLOUD_NAME/CLOUDINARY_UPLOAD_PRESET not set and dry_run=False")

    @property
    def upload_url(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/image/upload"

    def upload(self, data: bytes, *, public_id: str) -> str:
        """Upload JPEG bytes and return the public ``secure_url``."""
        if self.dry_run:
            logger.info("[DRY-RUN] Would upload %d bytes as %s", len(data), public_id)
            return f"dry-run://{public_id}.jpg"

        form = {"upload_preset": self.upload_preset, "public_id": public_id}
        if self.folder:
            form["folder"] = self.folder
        try:
            resp = requests.post(
                self.upload_url,
                data=form,
                files={"file": (f"{public_id}.jpg", data, "image/jpeg")},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Cloudinary upload failed: {exc}") from exc

        if not resp.ok:
            raise UploadError(f"Cloudinary upload failed ({resp.status_code}): {resp.text[:200]}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise UploadError("Cloudinary returned a non-JSON response") from exc
        url = body.get("secure_url") or body.get("url")
        if not url:
            message = (body.get("error") or {}).get("message") if isinstance(body.get("error"), dict) else None
            raise UploadError(f"Cloudinary response has no URL: {message or body}")
        logger.info("Uploaded %s to %s", public_id, url)
        return url
