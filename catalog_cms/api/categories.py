"""Category API endpoints.

Provides endpoints for workflow-gated categories:
- GET /categories - list categories
- POST /categories - create a category (opens an approval task)
- GET /categories/{id} - category details
- PUT /categories/{id} - update a category (back to review)
- DELETE /categories/{id} - delete a category
- POST /categories/{id}/sync - re-run Medusa sync
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_cms.api.converters import category_to_response
from catalog_cms.api.schemas import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    ErrorResponse,
    SyncResultResponse,
)
from catalog_cms.application.catalog_service import CatalogService, get_catalog_service
from catalog_cms.domain.entities import Category, ResourceKind

router = APIRouter(prefix="/categories", tags=["Categories"])

NOT_FOUND = {404: {"model": ErrorResponse}}
INVALID = {400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


async def populated_category(service: CatalogService, category: Category) -> CategoryResponse:
    """Category response with its children and collections."""
    return category_to_response(
        category,
        children=await service.list_child_categories(category.id),
        collections=await service.list_collections_for_category(category.id),
    )


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CategoryListResponse:
    categories = await service.list_records(ResourceKind.CATEGORY)
    return CategoryListResponse(
        items=[await populated_category(service, c) for c in categories],
        total=len(categories),
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID,
    summary="Create category",
    description="Create a category. It starts in review and an approval task is opened.",
)
async def create_category(
    request: CategoryCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CategoryResponse:
    category = await service.create(ResourceKind.CATEGORY, request.model_dump())
    return await populated_category(service, category)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses=NOT_FOUND,
    summary="Get category",
)
async def get_category(
    category_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CategoryResponse:
    category = await service.get(ResourceKind.CATEGORY, category_id)
    return await populated_category(service, category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**NOT_FOUND, **INVALID},
    summary="Update category",
    description="Update a category. Any edit sends it back to review.",
)
async def update_category(
    category_id: int,
    request: CategoryUpdateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CategoryResponse:
    category = await service.update(
        ResourceKind.CATEGORY,
        category_id,
        request.model_dump(exclude_unset=True),
    )
    return await populated_category(service, category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete category",
)
async def delete_category(
    category_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> None:
    await service.delete(ResourceKind.CATEGORY, category_id)


@router.post(
    "/{category_id}/sync",
    response_model=SyncResultResponse,
    responses=NOT_FOUND,
    summary="Sync category",
    description="Push the category to Medusa again. Only approved categories are sent.",
)
async def sync_category(
    category_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SyncResultResponse:
    result = await service.sync(ResourceKind.CATEGORY, category_id)
    return SyncResultResponse(**result.to_dict())
