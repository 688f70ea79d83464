"""Management API: create, list, replace and delete registered endpoints."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response as HTTPResponse
from pydantic import ValidationError as PydanticValidationError

from echo.errors import JSON_API_MEDIA_TYPE, ConflictError, NotFoundError, ValidationError
from echo.registry import Registry, get_registry
from echo.schemas import Endpoint, Many, One, validation_message

router = APIRouter(prefix="/endpoints", tags=["endpoints"])


async def decode_endpoint(request: Request) -> Endpoint:
    """Parse the request body as a one-resource envelope."""
    body = await request.body()
    try:
        document = One.model_validate_json(body)
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e)) from e
    return document.data


@router.get("")
async def list_endpoints(registry: Registry = Depends(get_registry)):
    endpoints = await registry.fetch_all()
    return Many(data=endpoints).model_dump()


@router.post("", status_code=201)
async def create_endpoint(
    endpoint: Endpoint = Depends(decode_endpoint),
    registry: Registry = Depends(get_registry),
):
    attributes = endpoint.attributes
    # Check-then-act: concurrent creates of the same pair may both pass
    if await registry.find(attributes.verb, attributes.path) is not None:
        raise ConflictError(f"Endpoint `{attributes.verb} {attributes.path}` already exists")

    created = await registry.create(endpoint)
    return One(data=created).model_dump()


@router.patch("/{endpoint_id:int}", status_code=201)
async def update_endpoint(
    endpoint_id: int,
    endpoint: Endpoint = Depends(decode_endpoint),
    registry: Registry = Depends(get_registry),
):
    updated = await registry.update(endpoint_id, endpoint)
    if updated is None:
        raise NotFoundError(f"Requested Endpoint with ID `{endpoint_id}` does not exist")
    return One(data=updated).model_dump()


@router.delete("/{endpoint_id:int}", status_code=204)
async def delete_endpoint(endpoint_id: int, registry: Registry = Depends(get_registry)):
    if not await registry.delete(endpoint_id):
        raise NotFoundError(f"Requested Endpoint with ID `{endpoint_id}` does not exist")
    return HTTPResponse(status_code=204, media_type=JSON_API_MEDIA_TYPE)
