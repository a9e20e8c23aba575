from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from .. import __version__
from ..core import feature_flags
from ..features.pool import create_pool_routers

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Squares Pool Engine", version=__version__)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    pool_router, dice_router = create_pool_routers()
    app.include_router(pool_router)
    app.include_router(dice_router)
    return app


app = create_app()


def main() -> None:  # pragma: no cover - runner
    import uvicorn

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    host = os.environ.get("BIND", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))
    logger.info(
        "Starting squares pool API",
        extra={"host": host, "port": port, "features": sorted(feature_flags.enabled_flags())},
    )
    uvicorn.run(app, host=host, port=port, factory=False)


if __name__ == "__main__":  # pragma: no cover
    main()
