import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings, warn_development_defaults
from .core.logging import configure_logging
from .core.database import init_database
from .core.templates import get_template_store
from .api.routes.v1.health import router as health_router
from .api.routes.v1.prompts import router as prompts_router
from .api.routes.v1.templates import router as templates_router


configure_logging(settings.log_level)
log = logging.getLogger("promptdesk.main")


def create_app() -> FastAPI:
    app = FastAPI(title="promptdesk API", version="0.1.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers v1
    app.include_router(health_router, prefix=f"{settings.api_prefix}/v1", tags=["health"])
    app.include_router(prompts_router, prefix=f"{settings.api_prefix}/v1", tags=["prompts"])
    app.include_router(templates_router, prefix=f"{settings.api_prefix}/v1", tags=["templates"])

    @app.on_event("startup")
    def _startup() -> None:
        warn_development_defaults()
        init_database()
        # Fail fast on a malformed template file rather than on first request
        templates = get_template_store().list()
        log.info("promptdesk ready (%d templates, owner=%s)", len(templates), settings.default_user_id)

    return app


app = create_app()
