"""FastAPI application exposing the gateway on every path."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .gateway import Gateway
from .responses import ProxyResponse, error_response

ROUTED_METHODS = ["GET", "OPTIONS", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def to_response(result: ProxyResponse) -> Response:
    return Response(content=result.body, status_code=result.status, headers=result.headers)


def create_app(gateway: Optional[Gateway] = None) -> FastAPI:
    gateway = gateway or Gateway.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Pending cache writes finish before the process exits
        await gateway.shutdown()

    app = FastAPI(title="feedproxy", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.gateway = gateway

    @app.api_route("/{path:path}", methods=ROUTED_METHODS)
    async def proxy(request: Request, path: str) -> Response:
        return to_response(await gateway.handle(request.method, str(request.url)))

    @app.exception_handler(StarletteHTTPException)
    async def routing_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Methods the router does not list still get the gateway's 405
        if exc.status_code == 405:
            return to_response(await gateway.handle(request.method, str(request.url)))
        return to_response(error_response(str(exc.detail), exc.status_code))

    return app
