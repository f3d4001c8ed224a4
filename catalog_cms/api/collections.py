"""Collection API endpoints.

Provides endpoints for workflow-gated collections:
- GET /collections - list collections
- POST /collections - create a collection (opens an approval task)
- GET /collections/{id} - collection details
- PUT /collections/{id} - update a collection (back to review)
- DELETE /collections/{id} - delete a collection
- POST /collections/{id}/sync - re-run Medusa sync
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_cms.api.converters import collection_to_response
from catalog_cms.api.schemas import (
    CollectionCreateRequest,
    CollectionListResponse,
    CollectionResponse,
    CollectionUpdateRequest,
    ErrorResponse,
    SyncResultResponse,
)
from catalog_cms.application.catalog_service import CatalogService, get_catalog_service
from catalog_cms.domain.entities import Collection, ResourceKind

router = APIRouter(prefix="/collections", tags=["Collections"])


async def populated_collection(
    service: CatalogService, collection: Collection
) -> CollectionResponse:
    """Collection response with its approval tasks, newest first."""
    tasks = await service.list_approval_tasks(collection_id=collection.id)
    return collection_to_response(collection, approval_tasks=tasks)


@router.get("", response_model=CollectionListResponse, summary="List collections")
async def list_collections(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CollectionListResponse:
    collections = await service.list_records(ResourceKind.COLLECTION)
    return CollectionListResponse(
        items=[await populated_collection(service, c) for c in collections],
        total=len(collections),
    )


@router.post(
    "",
    response_model=CollectionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create collection",
)
async def create_collection(
    request: CollectionCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CollectionResponse:
    """Create a collection.

    The collection starts in review and an approval task is opened
    for it.
    """
    collection = await service.create(ResourceKind.COLLECTION, request.model_dump())
    return await populated_collection(service, collection)


@router.get(
    "/{collection_id}",
    response_model=CollectionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get collection",
)
async def get_collection(
    collection_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CollectionResponse:
    collection = await service.get(ResourceKind.COLLECTION, collection_id)
    return await populated_collection(service, collection)


@router.put(
    "/{collection_id}",
    response_model=CollectionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update collection",
)
async def update_collection(
    collection_id: int,
    request: CollectionUpdateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CollectionResponse:
    """Update a collection.

    Any edit sends the collection back to review. Changing its
    categories opens a task whose diff lists added and removed ones.
    """
    collection = await service.update(
        ResourceKind.COLLECTION,
        collection_id,
        request.model_dump(exclude_unset=True),
    )
    return await populated_collection(service, collection)


@router.delete(
    "/{collection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete collection",
)
async def delete_collection(
    collection_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> None:
    await service.delete(ResourceKind.COLLECTION, collection_id)


@router.post(
    "/{collection_id}/sync",
    response_model=SyncResultResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Sync collection",
)
async def sync_collection(
    collection_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SyncResultResponse:
    result = await service.sync(ResourceKind.COLLECTION, collection_id)
    return SyncResultResponse(**result.to_dict())
