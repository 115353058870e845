"""REST API routes for listing the nodes and ways of the served extract."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from osmrest.exceptions import DecodeError, FileUnavailable
from osmrest.models.schemas import ErrorResponse, Node, Way
from osmrest.services.query import OsmQueryService

logger = logging.getLogger(__name__)

router = APIRouter()

BANNER = "OSM Rest Server"

ERROR_RESPONSES = {
    500: {"model": ErrorResponse, "description": "The extract is truncated or malformed"},
    503: {"model": ErrorResponse, "description": "The extract cannot be opened"},
}


def get_query_service(request: Request) -> OsmQueryService:
    """Return the query service bound to the app at startup."""
    return request.app.state.query_service


def _run_query(query):
    """Run a scan, turning reader failures into HTTP errors.

    Raises:
        HTTPException: 503 if the file cannot be opened, 500 if it cannot
            be decoded.
    """
    try:
        return query()
    except FileUnavailable as e:
        logger.error("Source file unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    except DecodeError as e:
        logger.error("Failed to decode source file: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to decode OSM data: {e}")


@router.get("/", response_class=PlainTextResponse)
def root():
    """Return the service banner."""
    return BANNER


@router.get("/v1/nodes", response_model=list[Node], responses=ERROR_RESPONSES)
def list_nodes(service: OsmQueryService = Depends(get_query_service)):
    """List every node of the extract, plain and dense, in file order.

    Nodes read from dense blocks carry ``info: null``.
    """
    return _run_query(service.list_nodes)


@router.get("/v1/ways", response_model=list[Way], responses=ERROR_RESPONSES)
def list_ways(service: OsmQueryService = Depends(get_query_service)):
    """List every way of the extract in file order, node refs unchanged."""
    return _run_query(service.list_ways)
