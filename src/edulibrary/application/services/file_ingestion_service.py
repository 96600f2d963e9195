from __future__ import annotations

import logging
from dataclasses import dataclass

from edulibrary.core.config import DEFAULT_MAX_UPLOAD_BYTES
from edulibrary.core.errors import UploadFailedError
from edulibrary.core.files import file_extension, sanitize_filename
from edulibrary.core.ids import short_disambiguator
from edulibrary.core.time import epoch_millis
from edulibrary.domain.models.resource import FileReference
from edulibrary.infrastructure.blobstore.store import BlobStore

logger = logging.getLogger(__name__)

# NAME_MAX is 255 on common filesystems; the atomic write stages to ".<key>.tmp".
MAX_KEY_LENGTH = 250


@dataclass(slots=True)
class StoredFile:
    public_url: str
    file_type: str
    storage_key: str
    size_bytes: int

    def as_reference(self) -> FileReference:
        return FileReference(
            file_url=self.public_url,
            file_type=self.file_type,
            storage_key=self.storage_key,
        )


class FileIngestionService:
    def __init__(self, blob_store: BlobStore, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.blob_store = blob_store
        self.max_upload_bytes = max_upload_bytes

    def upload(self, payload: bytes, original_name: str) -> StoredFile:
        if len(payload) > self.max_upload_bytes:
            raise UploadFailedError(
                f"Upload {original_name} is {len(payload)} bytes, over the {self.max_upload_bytes} byte quota"
            )

        key = self.storage_key_for(original_name)
        try:
            self.blob_store.put(key, payload)
            public_url = self.blob_store.public_url(key)
        except (OSError, ValueError) as exc:
            raise UploadFailedError(f"Upload of {original_name} failed: {exc}") from exc

        logger.info("Stored blob %s (%d bytes)", key, len(payload))
        return StoredFile(
            public_url=public_url,
            file_type=file_extension(original_name),
            storage_key=key,
            size_bytes=len(payload),
        )

    @staticmethod
    def storage_key_for(original_name: str) -> str:
        prefix = f"{epoch_millis()}-{short_disambiguator()}-"
        return prefix + sanitize_filename(original_name, max_length=MAX_KEY_LENGTH - len(prefix))
