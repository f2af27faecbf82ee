from __future__ import annotations

import re

from .models import Vendor

PLACEHOLDER_URL = "/api/placeholder/300/200"

_VIDEO_RE = re.compile(r"\.mp4$|\.webm$|\.ogg$|/videos/", re.IGNORECASE)


def media_kind(url: str) -> str:
    return "video" if _VIDEO_RE.search(url) else "image"


class MediaFailures:
    """Media items that failed to load, tracked per ``(vendor_id, index)``."""

    def __init__(self) -> None:
        self._failed: set[tuple[str, int]] = set()

    def record(self, vendor_id: str, index: int) -> None:
        self._failed.add((vendor_id, index))

    def has_failed(self, vendor_id: str, index: int) -> bool:
        return (vendor_id, index) in self._failed

    def resolve(self, vendor: Vendor) -> list[str]:
        """Return the vendor's media with only failing items replaced."""
        return [
            PLACEHOLDER_URL if self.has_failed(vendor.id, i) else url
            for i, url in enumerate(vendor.media)
        ]

    def __len__(self) -> int:
        return len(self._failed)
