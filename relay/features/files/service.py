import logging
import mimetypes

from fastapi import HTTPException, UploadFile

from relay.domain.errors import (
    EntropySourceError,
    HandleCollisionError,
    InvalidHandleError,
    IOReadError,
    IOWriteError,
    NotFoundError,
)
from relay.features.files.schemas import BlobInfoResponse, FileDetails, UploadResponse
from relay.infra.storage import BlobReader, BlobStore

logger = logging.getLogger("relay.files")


def media_type_for(handle: str) -> str:
    guessed, _ = mimetypes.guess_type(handle)
    return guessed or "application/octet-stream"


class FilesService:
    """HTTP-facing wrapper around a BlobStore.

    Malformed handles are reported as ``file_not_found`` so clients cannot
    tell a rejected handle from a missing one.
    """

    def __init__(self, *, store: BlobStore, base_url: str) -> None:
        self._store = store
        self._base_url = base_url.rstrip("/")

    def links(self, handle: str) -> dict[str, str]:
        return {
            "file_url": f"{self._base_url}/file/{handle}",
            "download_url": f"{self._base_url}/download/{handle}",
            "delete_url": f"{self._base_url}/delete/{handle}",
        }

    def upload(self, *, file: UploadFile) -> UploadResponse:
        original_name = file.filename or ""
        file.file.seek(0)
        try:
            result = self._store.put(file.file, original_name)
        except (HandleCollisionError, EntropySourceError):
            logger.exception("Could not allocate a handle for %r", original_name)
            raise HTTPException(status_code=503, detail="handle_unavailable")
        except IOWriteError:
            logger.exception("Error storing upload %r", original_name)
            raise HTTPException(status_code=500, detail="storage_error")

        logger.info("Stored %s (%d bytes)", result.handle, result.size)
        return UploadResponse(
            file_details=FileDetails(
                file_name=result.handle,
                original_name=result.original_name,
                size=result.size,
                extension=result.extension,
                upload_time=result.created_at,
            ),
            **self.links(result.handle),
        )

    def open(self, handle: str) -> BlobReader:
        try:
            return self._store.get(handle)
        except (InvalidHandleError, NotFoundError):
            raise HTTPException(status_code=404, detail="file_not_found")
        except IOReadError:
            logger.exception("Error reading file %s", handle)
            raise HTTPException(status_code=500, detail="storage_error")

    def delete(self, handle: str) -> None:
        try:
            self._store.delete(handle)
        except (InvalidHandleError, NotFoundError):
            raise HTTPException(status_code=404, detail="file_not_found")
        except IOWriteError:
            logger.exception("Error deleting file %s", handle)
            raise HTTPException(status_code=500, detail="storage_error")
        logger.info("Deleted %s", handle)

    def info(self, handle: str) -> BlobInfoResponse:
        try:
            blob = self._store.stat(handle)
        except (InvalidHandleError, NotFoundError):
            raise HTTPException(status_code=404, detail="file_not_found")
        except IOReadError:
            logger.exception("Error reading metadata of %s", handle)
            raise HTTPException(status_code=500, detail="storage_error")
        return BlobInfoResponse(
            file_name=blob.handle,
            size=blob.size,
            extension=blob.extension,
            modified_time=blob.modified_at,
        )
