# src/api/main.py

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.routes.health_router import router as health_router
from api.routes.package_router import router as package_router
from core.config.settings import settings
from core.containers.app_containers import AppContainer
from core.errors import GatewayError
from core.logging.logger import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AppContainer = app.container

    http_client = container.http_client()
    logger.info(f"{settings.APP_NAME} started")

    yield

    await http_client.aclose()
    logger.info("HTTP client closed")


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.reason}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.reason}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "reason": exc.reason},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": True, "reason": f"Invalid request: {details}"},
    )


def create_app() -> FastAPI:
    configure_logging()

    container = AppContainer()
    container.wire(modules=["api.routes.health_router", "api.routes.package_router"])
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan
    )

    app.container = container

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} ({elapsed_ms:.1f} ms)")
        return response

    app.include_router(health_router)
    app.include_router(package_router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
