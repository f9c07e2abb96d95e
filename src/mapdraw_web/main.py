"""mapdraw - drawing persistence service.

Main FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from mapdraw import DrawSession, JsonFileStore, Style, StyleSelector
from mapdraw_web.config import Settings, settings
from mapdraw_web.routers.drawings import router as drawings_router


def create_session(cfg: Settings = settings) -> DrawSession:
    """Build a DrawSession backed by the configured storage file and restore it."""
    store = JsonFileStore(cfg.storage_path)
    style = StyleSelector(Style(color=cfg.draw_color, weight=cfg.draw_weight, opacity=cfg.draw_opacity))
    session = DrawSession(
        store,
        style=style,
        circle_marker_radius=cfg.circle_marker_radius,
        cluster_radius_px=cfg.cluster_radius_px,
        export_filename=cfg.export_filename,
    )
    session.restore()
    return session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"{settings.app_name} starting (storage: {settings.storage_path})")
    app.state.session = create_session(settings)
    yield
    logger.info(f"{settings.app_name} stopped")


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.include_router(drawings_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()

