import os
from dataclasses import dataclass
from pathlib import Path

from relay.infra.handles import DEFAULT_TOKEN_BYTES


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    public_base_url: str | None = None
    token_bytes: int = DEFAULT_TOKEN_BYTES
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def blobs_dir(self) -> Path:
        return self.data_dir / "file"


def load_config() -> AppConfig:
    base_url = os.getenv("RELAY_PUBLIC_BASE_URL") or None
    return AppConfig(
        data_dir=Path(os.getenv("RELAY_DATA_DIR", "data")),
        public_base_url=base_url.rstrip("/") if base_url else None,
        token_bytes=int(os.getenv("RELAY_TOKEN_BYTES", str(DEFAULT_TOKEN_BYTES))),
        log_level=os.getenv("RELAY_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("RELAY_HOST", "127.0.0.1"),
        port=int(os.getenv("RELAY_PORT", "3000")),
    )
