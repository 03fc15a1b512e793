"""Category Schemas — camelCase contracts for the category catalog."""

from datetime import datetime
from uuid import UUID

from crewdesk.schemas.worker import CamelModel
from crewdesk.services.category_catalog import CategoryDraft


class CategoryCreate(CamelModel):
    name: str | None = None
    description: str | None = None
    icon: str | None = None
    is_active: bool = True
    parent: str | None = None
    sort_order: int = 0

    def to_draft(self) -> CategoryDraft:
        return CategoryDraft(**self.model_dump())


class ParentSummary(CamelModel):
    id: UUID
    name: str | None = None


class CategoryResponse(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    icon: str | None = None
    is_active: bool
    parent: ParentSummary | None = None
    sort_order: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> "CategoryResponse":
        return cls(**{k: v for k, v in record.items() if k in cls.model_fields})


class CategoryData(CamelModel):
    category: CategoryResponse


class CategoryListData(CamelModel):
    categories: list[CategoryResponse]


class CategoryEnvelope(CamelModel):
    success: bool = True
    message: str
    data: CategoryData


class CategoryListEnvelope(CamelModel):
    success: bool = True
    message: str
    count: int
    data: CategoryListData
