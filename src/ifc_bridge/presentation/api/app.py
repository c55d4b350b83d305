"""FastAPI Application.

Loopback HTTP transport for the host bridge.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ifc_bridge.application.services import CommandDispatcher
from ifc_bridge.domain import BridgeError, ExportFailedError
from ifc_bridge.presentation.api import routes
from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(dispatcher: CommandDispatcher, manage_executor: bool = True) -> FastAPI:
    """Create FastAPI application.

    Args:
        dispatcher: Dispatcher serving the host
        manage_executor: Start and stop the host executor with the app

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if manage_executor:
            dispatcher.executor.start()
        logger.info("Host bridge listening", host=dispatcher.settings.host_kind)

        yield

        if manage_executor:
            dispatcher.executor.stop()
        logger.info("Host bridge stopped")

    app = FastAPI(
        title="IFC Host Bridge",
        description="Element selection and IFC export bridge for CAD hosts",
        version=dispatcher.settings.app_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.dispatcher = dispatcher

    # Permissive CORS on every response, including errors; OPTIONS never
    # reaches the routes.
    @app.middleware("http")
    async def permissive_cors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            logger.debug("Bridge request", method=request.method, path=request.url.path)
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(ExportFailedError)
    async def export_failed(request: Request, exc: ExportFailedError) -> JSONResponse:
        logger.error(
            "IFC export failed",
            reason=exc.reason,
            file_path=str(exc.result.file_path),
        )
        return error_response(exc.status_code, f"Failed to export IFC: {exc.reason}")

    @app.exception_handler(BridgeError)
    async def bridge_error(request: Request, exc: BridgeError) -> JSONResponse:
        logger.info("Bridge request rejected", path=request.url.path, error=exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, "Invalid request")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Error handling request", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": f"Internal Server Error: {exc}"},
            headers=CORS_HEADERS,
        )

    app.include_router(routes.bridge.router, tags=["bridge"])

    return app
