from pathlib import Path

import pytest

from relay.config import AppConfig, load_config


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RELAY_DATA_DIR",
        "RELAY_PUBLIC_BASE_URL",
        "RELAY_TOKEN_BYTES",
        "RELAY_LOG_LEVEL",
        "RELAY_HOST",
        "RELAY_PORT",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()

    assert cfg == AppConfig(data_dir=Path("data"))
    assert cfg.blobs_dir == Path("data") / "file"
    assert cfg.token_bytes == 6
    assert cfg.port == 3000


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RELAY_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RELAY_PUBLIC_BASE_URL", "https://relay.example/")
    monkeypatch.setenv("RELAY_TOKEN_BYTES", "12")
    monkeypatch.setenv("RELAY_LOG_LEVEL", "debug")
    monkeypatch.setenv("RELAY_PORT", "8080")

    cfg = load_config()

    assert cfg.blobs_dir == tmp_path / "file"
    assert cfg.public_base_url == "https://relay.example"
    assert cfg.token_bytes == 12
    assert cfg.log_level == "DEBUG"
    assert cfg.port == 8080
