"""Catch-all route replaying registered mock responses."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response as HTTPResponse

from echo.errors import NotFoundError
from echo.registry import Registry, get_registry
from echo.schemas import VERBS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dispatch"])


@router.api_route("/{full_path:path}", methods=list(VERBS), include_in_schema=False)
async def dispatch(request: Request, registry: Registry = Depends(get_registry)):
    path = request.url.path
    response = await registry.find(request.method, path)
    if response is None:
        logger.debug(f"No mock registered for {request.method} {path}")
        raise NotFoundError(f"Requested page `{path}` does not exist")

    # No media_type: the stored headers alone decide the Content-Type
    return HTTPResponse(
        content=response.payload(),
        status_code=response.code,
        headers=response.headers,
    )
