# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from userhub.domain.users.repositories import MediaUploader
from userhub.shared.config import MediaConfig

from .cloudinary_uploader import CloudinaryUploader
from .local_uploader import LocalMediaUploader


def build_uploader(config: MediaConfig) -> MediaUploader:
    if config.backend == "cloudinary":
        return CloudinaryUploader(config)
    return LocalMediaUploader(config.media_root, config.media_base_url)


__all__ = ["CloudinaryUploader", "LocalMediaUploader", "build_uploader"]
