# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Filesystem media adapter for development and tests."""

from __future__ import annotations

import secrets
import shutil
from pathlib import Path

from userhub.domain.users.entities import UploadedMedia
from userhub.domain.users.repositories import MediaUploader
from userhub.shared.logging import logger


class LocalMediaUploader(MediaUploader):
    """Copies uploads under a media root and serves them from ``base_url``."""

    def __init__(self, root: Path, base_url: str = "/media") -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, relative_path: str) -> Path:
        path = (self._root / relative_path).resolve()
        if not path.is_relative_to(self._root.resolve()):
            msg = "Attempted directory traversal outside storage root"
            raise ValueError(msg)
        return path

    def upload(self, local_path: str) -> UploadedMedia | None:
        if not local_path:
            return None
        source = Path(local_path)
        if not source.is_file():
            logger.warning(f"media.local: no such file name={source.name}")
            return None

        name = f"{secrets.token_hex(8)}{source.suffix.lower()}"
        try:
            target = self._resolve(name)
            shutil.copyfile(source, target)
        except (OSError, ValueError) as exc:
            logger.warning(f"media.local: copy failed {type(exc).__name__} name={source.name}")
            return None

        logger.debug(f"media.local: stored path={target} size={target.stat().st_size}")
        return UploadedMedia(url=f"{self._base_url}/{name}", public_id=name)


__all__ = ["LocalMediaUploader"]
