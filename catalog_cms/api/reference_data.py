"""Reference data API endpoints.

Currencies and sales channels referenced by value-per-point overrides.
They are plain records outside the approval workflow.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_cms.api.converters import currency_to_response, sales_channel_to_response
from catalog_cms.api.schemas import (
    CurrencyCreateRequest,
    CurrencyListResponse,
    CurrencyResponse,
    ErrorResponse,
    SalesChannelCreateRequest,
    SalesChannelListResponse,
    SalesChannelResponse,
)
from catalog_cms.application.catalog_service import CatalogService, get_catalog_service
from catalog_cms.domain.entities import ResourceKind

currencies_router = APIRouter(prefix="/currencies", tags=["Currencies"])
sales_channels_router = APIRouter(prefix="/sales-channels", tags=["Sales Channels"])


# ============================================================================
# Currencies
# ============================================================================


@currencies_router.get("", response_model=CurrencyListResponse, summary="List currencies")
async def list_currencies(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CurrencyListResponse:
    currencies = await service.list_records(ResourceKind.CURRENCY)
    return CurrencyListResponse(
        items=[currency_to_response(c) for c in currencies],
        total=len(currencies),
    )


@currencies_router.post(
    "",
    response_model=CurrencyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create currency",
)
async def create_currency(
    request: CurrencyCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CurrencyResponse:
    currency = await service.create(ResourceKind.CURRENCY, request.model_dump())
    return currency_to_response(currency)


@currencies_router.get(
    "/{currency_id}",
    response_model=CurrencyResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get currency",
)
async def get_currency(
    currency_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CurrencyResponse:
    currency = await service.get(ResourceKind.CURRENCY, currency_id)
    return currency_to_response(currency)


# ============================================================================
# Sales Channels
# ============================================================================


@sales_channels_router.get(
    "", response_model=SalesChannelListResponse, summary="List sales channels"
)
async def list_sales_channels(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SalesChannelListResponse:
    channels = await service.list_records(ResourceKind.SALES_CHANNEL)
    return SalesChannelListResponse(
        items=[sales_channel_to_response(c) for c in channels],
        total=len(channels),
    )


@sales_channels_router.post(
    "",
    response_model=SalesChannelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create sales channel",
)
async def create_sales_channel(
    request: SalesChannelCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SalesChannelResponse:
    channel = await service.create(ResourceKind.SALES_CHANNEL, request.model_dump())
    return sales_channel_to_response(channel)


@sales_channels_router.get(
    "/{channel_id}",
    response_model=SalesChannelResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get sales channel",
)
async def get_sales_channel(
    channel_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SalesChannelResponse:
    channel = await service.get(ResourceKind.SALES_CHANNEL, channel_id)
    return sales_channel_to_response(channel)
