"""FastAPI application factory for the OSM REST service."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from osmrest.api.routes import router
from osmrest.config import CORS_ORIGINS
from osmrest.services.query import OsmQueryService

access_logger = logging.getLogger("osmrest.access")


def create_app(osm_file) -> FastAPI:
    """Build the app serving the entities of ``osm_file``.

    The path is bound once here; every request still scans the file anew.
    """
    app = FastAPI(title="OSM Rest Server")
    app.state.query_service = OsmQueryService(osm_file)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        access_logger.info("%s %s %s", request.method, request.url.path, response.status_code)
        return response

    app.include_router(router)
    return app
