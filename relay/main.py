import logging

import uvicorn
from fastapi import FastAPI

from relay.config import AppConfig, load_config
from relay.features.files.api import router as files_router
from relay.infra.handles import HandleGenerator
from relay.infra.storage import BlobStore
from relay.web.health import router as health_router
from relay.web.pages import router as pages_router

logger = logging.getLogger("relay.main")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(cfg: AppConfig | None = None) -> FastAPI:
    cfg = cfg or load_config()
    store = BlobStore(cfg.blobs_dir, HandleGenerator(token_bytes=cfg.token_bytes))

    app = FastAPI(
        title="Uploader Docs",
        description="Upload a file, then fetch or delete it through its generated link.",
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url=None,
        swagger_ui_parameters={"displayRequestDuration": True},
    )
    app.state.cfg = cfg
    app.state.store = store
    app.include_router(pages_router)
    app.include_router(health_router)
    app.include_router(files_router)
    return app


def run() -> None:
    cfg = load_config()
    configure_logging(cfg.log_level)
    app = create_app(cfg)
    logger.info("Serving %s on http://%s:%d", cfg.blobs_dir, cfg.host, cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    run()
