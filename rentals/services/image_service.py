"""Upload listing photos to object storage."""

from __future__ import annotations

import time
from typing import List, Sequence, Tuple

from ..errors import ListingStoreError
from ..utils.logging import get_logger, kv

LOGGER = get_logger("services.images")

# (file bytes, content type)
ImageFile = Tuple[bytes, str]


def image_path(property_id: str, index: int, millis: int | None = None) -> str:
    stamp = millis if millis is not None else int(time.time() * 1000)
    return f"properties/{property_id}/image_{index}_{stamp}"


class ImageService:
    def __init__(self, repository):
        self.repository = repository

    def upload_images(self, files: Sequence[ImageFile], property_id: str) -> List[str]:
        """Upload every file and return the URLs of those that succeeded, in input order."""

        urls: List[str] = []
        for index, (data, content_type) in enumerate(files):
            path = image_path(property_id, index)
            try:
                urls.append(self.repository.upload_image(path, data, content_type))
            except (ListingStoreError, OSError) as exc:
                LOGGER.warning(kv("image_upload_failed", property=property_id, index=index, error=exc))
        return urls
