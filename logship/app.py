import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI

from logship.config import ShipperConfig
from logship.engine import CloudWatchLogger
from logship.log import configure_logging
from logship.middleware import install

# Run with: uvicorn --factory logship.app:create_app


def create_app(config: Optional[ShipperConfig] = None, client=None, clock=None) -> FastAPI:
    # ========= Env / Config =========
    config = config or ShipperConfig.from_env()
    configure_logging(config.log_level, config.log_format)
    cloudwatch = CloudWatchLogger(config, client=client, clock=clock)
    started = time.monotonic()

    # ========= Lifespan =========
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # InitializationError propagates and aborts startup
        await cloudwatch.initialize()
        yield
        await cloudwatch.drain()

    # ========= App / Middleware =========
    app = FastAPI(lifespan=lifespan)
    app.state.cloudwatch = cloudwatch
    install(app, cloudwatch)

    # ========= Routes =========
    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - started, 3),
        }

    return app
