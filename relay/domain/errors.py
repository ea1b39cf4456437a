class RelayError(Exception):
    """Base class for blob store failures."""


class InvalidHandleError(RelayError):
    def __init__(self, handle: str) -> None:
        super().__init__(f"invalid handle: {handle!r}")
        self.handle = handle


class NotFoundError(RelayError):
    def __init__(self, handle: str) -> None:
        super().__init__(f"blob not found: {handle}")
        self.handle = handle


class HandleCollisionError(RelayError):
    """Every generated handle was already taken."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"handle collision after {attempts} attempts")
        self.attempts = attempts


class EntropySourceError(RelayError):
    pass


class IOWriteError(RelayError):
    pass


class IOReadError(RelayError):
    pass
