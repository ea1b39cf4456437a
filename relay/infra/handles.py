import re
import secrets
from collections.abc import Callable

from relay.domain.errors import EntropySourceError

MIN_TOKEN_BYTES = 6
DEFAULT_TOKEN_BYTES = 6

_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9_-]{1,16}")


def sanitize_extension(original_name: str) -> str:
    """Extension of an untrusted filename, or "" if it is not a safe suffix.

    Directory components (either separator) are ignored and a name made of a
    single leading dot (".bashrc") has no extension.
    """

    base = re.split(r"[/\\]", original_name or "")[-1]
    stem = base.lstrip(".")
    dot = stem.rfind(".")
    if dot < 0:
        return ""
    ext = stem[dot:]
    if not _EXTENSION_RE.fullmatch(ext):
        return ""
    return ext


def handle_pattern(token_bytes: int) -> re.Pattern[str]:
    return re.compile(rf"[0-9a-f]{{{token_bytes * 2}}}(?:\.[A-Za-z0-9_-]{{1,16}})?")


def is_valid_handle(handle: str, token_bytes: int = DEFAULT_TOKEN_BYTES) -> bool:
    if not isinstance(handle, str):
        return False
    return handle_pattern(token_bytes).fullmatch(handle) is not None


class HandleGenerator:
    def __init__(
        self,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        source: Callable[[int], bytes] = secrets.token_bytes,
    ) -> None:
        if token_bytes < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be >= {MIN_TOKEN_BYTES}")
        self._token_bytes = token_bytes
        self._source = source
        self._pattern = handle_pattern(token_bytes)

    @property
    def token_bytes(self) -> int:
        return self._token_bytes

    @property
    def pattern(self) -> re.Pattern[str]:
        return self._pattern

    def generate(self, extension: str = "") -> str:
        try:
            raw = self._source(self._token_bytes)
        except (OSError, NotImplementedError) as e:
            raise EntropySourceError(f"random source unavailable: {e}") from e
        if len(raw) != self._token_bytes:
            raise EntropySourceError(
                f"random source returned {len(raw)} bytes, expected {self._token_bytes}"
            )
        return raw.hex() + extension
