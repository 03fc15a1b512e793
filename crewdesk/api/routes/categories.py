"""Category Routes — create, list and fetch service categories."""

import logging

from fastapi import APIRouter, Depends, Query, status

from crewdesk.api.dependencies import get_catalog
from crewdesk.schemas.category import (
    CategoryCreate, CategoryData, CategoryEnvelope, CategoryListData,
    CategoryListEnvelope, CategoryResponse,
)
from crewdesk.services.category_catalog import CategoryCatalog

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.post(
    "", response_model=CategoryEnvelope, status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreate, catalog: CategoryCatalog = Depends(get_catalog),
):
    category = await catalog.create_category(body.to_draft())
    return CategoryEnvelope(
        message="Category created successfully",
        data=CategoryData(category=CategoryResponse.from_record(category)),
    )


@router.get("", response_model=CategoryListEnvelope)
async def list_categories(
    is_active: bool | None = Query(None, alias="isActive"),
    parent: str | None = Query(None),
    catalog: CategoryCatalog = Depends(get_catalog),
):
    """Top-level categories, or the children of ?parent=<id>."""
    categories = await catalog.list_categories(is_active=is_active, parent=parent)
    return CategoryListEnvelope(
        message="Categories retrieved successfully",
        count=len(categories),
        data=CategoryListData(
            categories=[CategoryResponse.from_record(c) for c in categories],
        ),
    )


@router.get("/{category_id}", response_model=CategoryEnvelope)
async def get_category(
    category_id: str, catalog: CategoryCatalog = Depends(get_catalog),
):
    category = await catalog.get_category(category_id)
    return CategoryEnvelope(
        message="Category retrieved successfully",
        data=CategoryData(category=CategoryResponse.from_record(category)),
    )
