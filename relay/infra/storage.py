import os
import threading
import time
import uuid
from collections.abc import Iterator
from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from relay.domain.errors import (
    HandleCollisionError,
    InvalidHandleError,
    IOReadError,
    IOWriteError,
    NotFoundError,
)
from relay.infra.handles import HandleGenerator, sanitize_extension

PARTIAL_PREFIX = ".partial-"
DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_STALE_PARTIAL_SECONDS = 3600.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoreResult:
    handle: str
    original_name: str
    size: int
    extension: str
    created_at: datetime


@dataclass(frozen=True)
class BlobInfo:
    handle: str
    size: int
    extension: str
    modified_at: datetime


class BlobReader:
    """Open binary stream over one stored blob."""

    def __init__(self, handle: str, fh: BinaryIO, size: int) -> None:
        self._handle = handle
        self._fh = fh
        self._size = size

    @property
    def handle(self) -> str:
        return self._handle

    @property
    def size(self) -> int:
        return self._size

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def read(self, n: int = -1) -> bytes:
        try:
            return self._fh.read(n)
        except OSError as e:
            raise IOReadError(f"failed to read {self._handle}: {e}") from e

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        # Closes the reader once exhausted or abandoned.
        try:
            while True:
                chunk = self.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "BlobReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class BlobStore:
    """Directory of opaque blobs keyed by randomly generated handles.

    Content is streamed to a ``.partial-*`` file first and renamed onto its
    handle under a single-writer lock, so a handle is only ever visible with
    complete content and is never issued twice. Handle allocation regenerates
    on collision and gives up with ``HandleCollisionError`` after
    ``max_attempts`` draws.

    Caller-supplied handles are checked against the generator's exact shape
    before any filesystem access.

    A ``get`` racing a ``delete`` of the same handle either fails with
    ``NotFoundError`` or, where the platform keeps unlinked files readable,
    completes against the removed content. The store assumes it is the only
    writer of ``root``.
    """

    def __init__(
        self,
        root: Path,
        generator: HandleGenerator | None = None,
        *,
        max_attempts: int = 2,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._generator = generator or HandleGenerator()
        self._max_attempts = max_attempts
        self._chunk_size = chunk_size
        self._commit_lock = threading.Lock()
        self.purge_partials()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def generator(self) -> HandleGenerator:
        return self._generator

    def put(self, content: BinaryIO, original_name: str) -> StoreResult:
        extension = sanitize_extension(original_name)
        partial, size = self._write_partial(content)
        try:
            with self._commit_lock:
                handle = self._allocate(extension)
                try:
                    os.replace(partial, self._root / handle)
                except OSError as e:
                    raise IOWriteError(f"failed to commit upload: {e}") from e
        except BaseException:
            self._discard(partial)
            raise
        return StoreResult(
            handle=handle,
            original_name=original_name,
            size=size,
            extension=extension,
            created_at=utc_now(),
        )

    def get(self, handle: str) -> BlobReader:
        path = self._path_for(handle)
        try:
            fh = open(path, "rb")
        except FileNotFoundError as e:
            raise NotFoundError(handle) from e
        except OSError as e:
            raise IOReadError(f"failed to open {handle}: {e}") from e
        try:
            size = os.fstat(fh.fileno()).st_size
        except OSError as e:
            fh.close()
            raise IOReadError(f"failed to stat {handle}: {e}") from e
        return BlobReader(handle, fh, size)

    def delete(self, handle: str) -> None:
        path = self._path_for(handle)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(handle) from e
        except OSError as e:
            raise IOWriteError(f"failed to delete {handle}: {e}") from e

    def exists(self, handle: str) -> bool:
        try:
            path = self._path_for(handle)
        except InvalidHandleError:
            return False
        return path.is_file()

    def stat(self, handle: str) -> BlobInfo:
        path = self._path_for(handle)
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise NotFoundError(handle) from e
        except OSError as e:
            raise IOReadError(f"failed to stat {handle}: {e}") from e
        return BlobInfo(
            handle=handle,
            size=st.st_size,
            extension=handle[self._generator.token_bytes * 2 :],
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def handles(self) -> list[str]:
        pattern = self._generator.pattern
        try:
            return sorted(
                p.name for p in self._root.iterdir() if pattern.fullmatch(p.name) and p.is_file()
            )
        except OSError as e:
            raise IOReadError(f"failed to list {self._root}: {e}") from e

    def purge_partials(self, older_than: float = DEFAULT_STALE_PARTIAL_SECONDS) -> int:
        """Remove ``.partial-*`` files last modified more than ``older_than`` seconds ago."""

        cutoff = time.time() - older_than
        removed = 0
        for p in self._root.glob(f"{PARTIAL_PREFIX}*"):
            try:
                if p.stat().st_mtime > cutoff:
                    continue
                p.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise IOWriteError(f"failed to purge {p.name}: {e}") from e
            removed += 1
        return removed

    def _path_for(self, handle: str) -> Path:
        if not isinstance(handle, str) or not self._generator.pattern.fullmatch(handle):
            raise InvalidHandleError(str(handle))
        return self._root / handle

    def _allocate(self, extension: str) -> str:
        for _ in range(self._max_attempts):
            handle = self._generator.generate(extension)
            if not (self._root / handle).exists():
                return handle
        raise HandleCollisionError(self._max_attempts)

    def _write_partial(self, content: BinaryIO) -> tuple[Path, int]:
        partial = self._root / f"{PARTIAL_PREFIX}{uuid.uuid4().hex}"
        size = 0
        try:
            with open(partial, "xb") as out:
                while True:
                    chunk = content.read(self._chunk_size)
                    if not chunk:
                        break
                    out.write(chunk)
                    size += len(chunk)
                out.flush()
                os.fsync(out.fileno())
        except OSError as e:
            self._discard(partial)
            raise IOWriteError(f"failed to write upload: {e}") from e
        except BaseException:
            self._discard(partial)
            raise
        return partial, size

    def _discard(self, partial: Path) -> None:
        # The original failure is what the caller sees.
        with suppress(OSError):
            partial.unlink(missing_ok=True)
