from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from ministry.db import filters as _filters  # noqa: F401  (register the scope filter listener)
from ministry.db.init_db import init_db
from ministry.logging_config import configure_app_logging
from ministry.routers import attendance, contributions, events, health, members, org, user_roles
from ministry.security.config import load_security_config
from ministry.security.dependencies import enforce_security
from ministry.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        config_path = settings.resolved_security_config_path()
        app.state.security_config = load_security_config(config_path)
        logger.info("Loaded security config: %s", config_path)

        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured, seed=%s)", settings.seed_demo_data)

        yield

    # Every route passes through the security dependency; handlers stay unaware of it.
    app = FastAPI(title="Ministry API", dependencies=[Depends(enforce_security)], lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(org.router)
    app.include_router(members.router)
    app.include_router(events.router)
    app.include_router(attendance.router)
    app.include_router(contributions.router)
    app.include_router(user_roles.router)

    return app


app = create_app()
