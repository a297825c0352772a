"""
Media storage for DOCX documents.

Registers binary assets under ``word/media/`` and infers their content
type from the file extension.
"""

import logging
import posixpath
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..constants import CT_OCTET_STREAM, IMAGE_CONTENT_TYPES, PATH_MEDIA_PREFIX
from ..exceptions import InvalidArgumentError
from .id_manager import IDManager

logger = logging.getLogger(__name__)

MEDIA_PART_PREFIX = "word/media/"


def content_type_for(filename: str) -> str:
    """
    Infer a content type from a file name.

    Args:
        filename: File name or path

    Returns:
        MIME type, ``application/octet-stream`` when the extension is unknown
    """
    ext = posixpath.splitext(filename.lower())[1]
    return IMAGE_CONTENT_TYPES.get(ext, CT_OCTET_STREAM)


@dataclass
class MediaFile:
    """A stored media entry."""

    id: str
    name: str
    path: str
    content_type: str
    data: bytes


class MediaManager:
    """
    Stores media files of a document.

    New files are named ``image{N}{ext}``; files registered from a loaded
    package keep their original path and push the name counter past any
    ``imageN`` they use.
    """

    def __init__(self, id_manager: Optional[IDManager] = None):
        self._id_manager = id_manager or IDManager()
        self._files: Dict[str, MediaFile] = {}
        self._counter = 0
        self._lock = threading.Lock()

    def add(self, data: bytes, filename: str) -> MediaFile:
        """
        Store new media bytes.

        Args:
            data: Raw file data
            filename: Original file name, used for its extension

        Returns:
            Stored media entry
        """
        if not data:
            raise InvalidArgumentError("media data cannot be empty", operation="MediaManager.add")
        if not filename:
            raise InvalidArgumentError("filename cannot be empty", operation="MediaManager.add")

        ext = posixpath.splitext(filename.lower())[1]
        with self._lock:
            media_id = self._id_manager.generate_unique_id("image")
            self._counter += 1
            name = f"image{self._counter}{ext}"
            media = MediaFile(media_id, name, MEDIA_PART_PREFIX + name, content_type_for(name), bytes(data))
            self._files[media_id] = media

        logger.debug(f"Stored media {media.path} ({len(media.data)} bytes)")
        return media

    def register_existing(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        media_id: Optional[str] = None,
    ) -> MediaFile:
        """
        Register media read from an existing package.

        A path that is already registered returns the stored entry.
        """
        if not data:
            raise InvalidArgumentError("media data cannot be empty", operation="MediaManager.register_existing")
        if not path:
            raise InvalidArgumentError("media path cannot be empty", operation="MediaManager.register_existing")

        normalized = path.replace("\\", "/").strip().lstrip("/")
        if not normalized.lower().startswith(PATH_MEDIA_PREFIX):
            normalized = MEDIA_PART_PREFIX + posixpath.basename(normalized)
        name = posixpath.basename(normalized)

        with self._lock:
            existing = self._find_by_path(normalized)
            if existing is not None:
                return existing

            media_id = media_id or self._id_manager.generate_unique_id("image")
            stem = posixpath.splitext(name.lower())[0]
            if stem.startswith("image") and stem[5:].isdigit():
                self._counter = max(self._counter, int(stem[5:]))

            media = MediaFile(media_id, name, normalized, content_type or content_type_for(name), bytes(data))
            self._files[media_id] = media

        logger.debug(f"Registered existing media {normalized}")
        return media

    def _find_by_path(self, path: str) -> Optional[MediaFile]:
        lowered = path.lower()
        for media in self._files.values():
            if media.path.lower() == lowered:
                return media
        return None

    def get(self, media_id: str) -> Optional[MediaFile]:
        with self._lock:
            return self._files.get(media_id)

    def get_by_path(self, path: str) -> Optional[MediaFile]:
        with self._lock:
            return self._find_by_path(path)

    def all(self) -> List[MediaFile]:
        with self._lock:
            return list(self._files.values())

    def __len__(self) -> int:
        return len(self._files)
