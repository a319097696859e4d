"""Travel API Proxy — FastAPI application entry point.

Proxies browser requests to chat, weather, events, travel booking and
currency providers, applying per-route fixed-window rate limits keyed by
client address.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from src.config.settings import get_settings
from src.logging.audit import get_audit_logger, setup_logging
from src.proxy.errors import ProxyError
from src.proxy.handler import SERVER_ERROR_MESSAGE, close_client, handle_route
from src.proxy.routes import ROUTES, RouteSpec

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    get_audit_logger().info("Proxy started")
    yield
    await close_client()
    get_audit_logger().info("Proxy stopped")


app = FastAPI(
    title="Travel API Proxy",
    description="Rate-limited proxy for chat, weather, events, travel and currency APIs",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    get_audit_logger().error("Unhandled server error", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": SERVER_ERROR_MESSAGE})


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Travel API proxy is running"


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


def _make_endpoint(spec: RouteSpec):
    async def endpoint(request: Request):
        return await handle_route(spec, request)

    endpoint.__name__ = f"{spec.name}_endpoint"
    return endpoint


for _spec in ROUTES:
    app.add_api_route(_spec.path, _make_endpoint(_spec), methods=[_spec.method], name=_spec.name)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
