# =======================================================================================
# access_request/main.py - FastAPI Application Entry Point
# =======================================================================================
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from .config import config
from .api.routes.access import router as access_router
from .api.routes.assets import router as assets_router
from .api.routes.gateway import router as gateway_router
from .api.dependencies import gateway_client
from .database import db_manager
from .logging_config import configure_logging, get_logger
from .models.schemas import HealthResponse

logger = get_logger(__name__)


def create_app() -> FastAPI:
    configure_logging(
        log_level="DEBUG" if config.API_DEBUG else config.LOG_LEVEL,
        format_as_json=config.LOG_JSON,
    )

    app = FastAPI(
        title="Access Request API",
        version="1.0.0",
        description="Relays signed physical-access requests to the access-control gateway",
        debug=config.API_DEBUG,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(access_router, prefix="/api", tags=["access"])
    app.include_router(assets_router, prefix="/api", tags=["assets"])
    app.include_router(gateway_router, prefix="/api", tags=["gateway"])

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        try:
            db_manager.fetch_one("SELECT 1")
            return HealthResponse(status="ok", dataAvailable=True, message=None)
        except SQLAlchemyError as e:
            logger.error("health_check_database_error", error=str(e))
            return HealthResponse(status="error", dataAvailable=False, message="Database unavailable")

    @app.on_event("shutdown")
    def shutdown_event():
        gateway_client.sender.close()

    logger.info("access_request_api_started", debug=config.API_DEBUG)
    return app


app = create_app()
