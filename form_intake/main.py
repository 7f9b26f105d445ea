from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine

from form_intake.api.router import router as forms_router
from form_intake.core.config import settings
from form_intake.core.http_hardening import install_http_hardening
from form_intake.core.registry import load_configuration
from form_intake.db.session import build_engine, build_session_factory
from form_intake.schemas.form_config import Configuration
from form_intake.services.pages import build_templates
from form_intake.services.schema_init import initialize_schema

_LOG = logging.getLogger("form_intake")


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine: Engine = app.state.engine
    # Raises SchemaInitError before the server starts accepting requests.
    initialize_schema(engine, app.state.configuration)
    try:
        yield
    finally:
        if app.state.owns_engine:
            engine.dispose()


def create_app(configuration: Configuration | None = None, engine: Engine | None = None) -> FastAPI:
    if configuration is None:
        configuration = load_configuration(settings.CONFIG_PATH)
    owns_engine = engine is None
    if engine is None:
        engine = build_engine(
            configuration.sqlalchemy_url,
            pool_size=settings.DB_POOL_SIZE,
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        )
    _LOG.debug("Database url: %s", engine.url.render_as_string(hide_password=True))

    app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
    app.state.configuration = configuration
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = build_session_factory(engine)
    app.state.templates = build_templates(settings.TEMPLATES_DIR)

    install_http_hardening(app)

    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "ok"}

    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="static")
    app.include_router(forms_router)
    return app
