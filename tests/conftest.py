import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    # Ensure `import relay...` works without installing the package.
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def store(tmp_path: Path):
    from relay.infra.storage import BlobStore

    return BlobStore(root=tmp_path / "file")


@pytest.fixture
def client(tmp_path: Path):
    from fastapi.testclient import TestClient

    from relay.config import AppConfig
    from relay.main import create_app

    app = create_app(AppConfig(data_dir=tmp_path))
    with TestClient(app) as c:
        yield c
