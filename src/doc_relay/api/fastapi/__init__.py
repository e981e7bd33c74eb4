import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from doc_relay.api.fastapi.middleware.errors.catchall import CatchAllExceptionMiddleware
from doc_relay.api.fastapi.middleware.errors.handlers import register_error_handlers
from doc_relay.api.fastapi.middleware.request_size_limit import RequestSizeLimitMiddleware
from doc_relay.api.fastapi.routers import register_all_routers
from doc_relay.api.fastapi.settings import ApiConfig
from doc_relay.app import CURRENT_ENVIRONMENT
from doc_relay.app.settings import AppSettings, get_app_settings
from doc_relay.factory import service_from_env
from doc_relay.service import ArtifactService

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001"


def _operation_id(route: APIRoute) -> str:
    # "Artifacts" + "get_artifact" -> "artifacts_get_artifact"
    tag = route.tags[0].strip().lower().replace(" ", "_") if route.tags else "default"
    return f"{tag}_{route.name}"


def _cors_origins(api_config: ApiConfig) -> list[str]:
    if api_config.cors_origins:
        return list(api_config.cors_origins)
    raw = os.getenv("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app(
        service: Optional[ArtifactService] = None,
        *,
        app_config: Optional[AppSettings] = None,
        api_config: Optional[ApiConfig] = None,
) -> FastAPI:
    """Build the doc-relay API.

    With ``service`` given, the app uses it as-is (tests, embedding). Without
    it, the lifespan builds one from environment settings and closes the Mongo
    client on shutdown.
    """
    api_config = api_config or ApiConfig()
    app_settings = get_app_settings(
        name=app_config.name if app_config else None,
        version=app_config.version if app_config else None,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if service is not None:
            _app.state.artifact_service = service
            yield
            return
        async with service_from_env() as svc:
            _app.state.artifact_service = svc
            yield

    app = FastAPI(
        title=app_settings.name,
        version=app_settings.version,
        generate_unique_id_function=_operation_id,
        lifespan=lifespan,
    )
    app.state.api_config = api_config
    if service is not None:
        app.state.artifact_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(api_config),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if api_config.max_request_bytes:
        app.add_middleware(RequestSizeLimitMiddleware, max_bytes=api_config.max_request_bytes)

    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    register_all_routers(app, base_package="doc_relay.api.fastapi.routers")
    if api_config.routers_path:
        register_all_routers(app, base_package=api_config.routers_path)

    logger.info("%s %s ready [env: %s]", app_settings.name, app_settings.version, CURRENT_ENVIRONMENT)
    return app


def set_servers(app: FastAPI, base_url: Optional[str], version: str) -> None:
    """Advertise the mounted location in the OpenAPI ``servers`` block."""
    root = base_url.rstrip("/") if base_url else ""
    app.servers = [{"url": f"{root}/{version}"}]
    app.openapi_schema = None


def create_and_register_api(
        service: Optional[ArtifactService] = None,
        *,
        app_config: Optional[AppSettings] = None,
        api_config: Optional[ApiConfig] = None,
) -> FastAPI:
    """Mount the API under ``/{version}`` on a thin parent app."""
    api_config = api_config or ApiConfig()
    child = create_app(service, app_config=app_config, api_config=api_config)
    set_servers(child, api_config.public_base_url, api_config.version)

    @asynccontextmanager
    async def lifespan(_parent: FastAPI):
        # Mounted apps do not get lifespan events of their own
        async with child.router.lifespan_context(child):
            yield

    parent = FastAPI(title=f"{child.title} (root)", lifespan=lifespan)
    parent.mount(f"/{api_config.version}", child, name=api_config.version)
    return parent


__all__ = ["create_app", "create_and_register_api", "set_servers"]
