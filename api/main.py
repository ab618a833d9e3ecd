import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from auth import dependencies as auth_dependencies
from core import config
from core.audit import AuditSink, LoggingAuditSink
from core.errors import register_error_handlers
from query import router as query_router
from query.service import QueryGateway

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    # Uvicorn only configures its own loggers; the app logs through the root logger.
    level = config.log_level()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Open the store once per process, before any request is served.
    configure_logging()
    gateway: QueryGateway = app.state.gateway
    if not app.state.api_token:
        logger.warning("api_token_missing all requests will be rejected")
    gateway.open()
    try:
        yield
    finally:
        gateway.close()


def create_app(
    *,
    db_file: str | Path | None = None,
    api_token: str | None = None,
    audit_sink: AuditSink | None = None,
    development: bool | None = None,
) -> FastAPI:
    if audit_sink is None and config.query_log_enabled():
        audit_sink = LoggingAuditSink()

    app = FastAPI(lifespan=lifespan, dependencies=[Depends(auth_dependencies.require_api_token)])
    app.state.gateway = QueryGateway(db_file or config.db_file(), audit_sink=audit_sink)
    app.state.api_token = api_token if api_token is not None else config.api_token()

    register_error_handlers(app, development=development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(query_router.router, tags=["query"])

    @app.get("/health")
    def health(request: Request) -> dict:
        gateway: QueryGateway = request.app.state.gateway
        return {
            "status": "ok",
            "database": "initialized" if gateway.is_initialized else "not initialized",
        }

    @app.get("/")
    def root() -> dict:
        return {"message": "sql gateway api"}

    return app


load_dotenv()
app = create_app()


def run() -> None:
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=config.host(), port=config.port())


if __name__ == "__main__":
    run()
