# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Cloudinary upload adapter built on the official SDK."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import cloudinary.uploader

from userhub.domain.users.entities import UploadedMedia
from userhub.domain.users.repositories import MediaUploader
from userhub.shared.config import MediaConfig
from userhub.shared.logging import logger


class CloudinaryUploader(MediaUploader):
    def __init__(self, config: MediaConfig) -> None:
        if not (
            config.cloudinary_cloud_name
            and config.cloudinary_api_key
            and config.cloudinary_api_secret
        ):
            raise ValueError("Cloudinary credentials are not configured")
        # Per-call credentials; the SDK's global config is never set.
        self._options: dict[str, Any] = {
            "cloud_name": config.cloudinary_cloud_name,
            "api_key": config.cloudinary_api_key,
            "api_secret": config.cloudinary_api_secret,
            "timeout": config.upload_timeout,
        }

    def upload(self, local_path: str) -> UploadedMedia | None:
        if not local_path:
            return None
        path = Path(local_path)
        if not path.is_file():
            logger.warning(f"media.cloudinary: no such file name={path.name}")
            return None

        try:
            body = cloudinary.uploader.upload(
                str(path), resource_type="auto", **self._options
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"media.cloudinary: upload failed {type(exc).__name__} name={path.name}")
            return None

        url = (body or {}).get("secure_url") or (body or {}).get("url")
        if not url:
            logger.warning(f"media.cloudinary: response without url name={path.name}")
            return None

        logger.info(f"media.cloudinary: uploaded name={path.name} public_id={body.get('public_id')}")
        return UploadedMedia(url=url, public_id=body.get("public_id"))


__all__ = ["CloudinaryUploader"]
