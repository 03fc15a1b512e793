"""Category Catalog — create, list and fetch service categories.

Invariants:
    - Category names are unique; a duplicate is a ConflictError whether caught
      by the pre-check or by the unique constraint
    - A parent reference must parse (FormatError) and exist (NotFoundError)
    - Listing without a parent returns top-level categories only, ordered by
      sort_order then name
"""

import logging
from dataclasses import dataclass

from crewdesk.core.domain_types import CategoryId
from crewdesk.core.errors import (
    ConflictError, DuplicateRecordError, NotFoundError, ValidationError,
)
from crewdesk.core.repository_protocols import CategoryRepository
from crewdesk.services.worker_onboarding import require_identifier

logger = logging.getLogger(__name__)

CATEGORY_NAME_MAX_LENGTH = 100
CATEGORY_DESCRIPTION_MAX_LENGTH = 500
CATEGORY_ICON_MAX_LENGTH = 255
DUPLICATE_NAME_MESSAGE = "Category with this name already exists"


@dataclass
class CategoryDraft:
    name: str | None = None
    description: str | None = None
    icon: str | None = None
    is_active: bool = True
    parent: str | None = None
    sort_order: int = 0


def check_category_draft(draft: CategoryDraft) -> ValidationError | None:
    name = (draft.name or "").strip()
    if not name:
        return ValidationError("Category name is required", field="name")
    if len(name) > CATEGORY_NAME_MAX_LENGTH:
        return ValidationError(
            f"Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters",
            field="name",
        )
    if draft.description and len(draft.description) > CATEGORY_DESCRIPTION_MAX_LENGTH:
        return ValidationError(
            f"Description cannot exceed {CATEGORY_DESCRIPTION_MAX_LENGTH} characters",
            field="description",
        )
    if draft.icon and len(draft.icon) > CATEGORY_ICON_MAX_LENGTH:
        return ValidationError(
            f"Icon cannot exceed {CATEGORY_ICON_MAX_LENGTH} characters", field="icon",
        )
    return None


class CategoryCatalog:
    def __init__(self, categories: CategoryRepository):
        self._categories = categories

    async def create_category(self, draft: CategoryDraft) -> dict:
        error = check_category_draft(draft)
        if error:
            raise error
        name = draft.name.strip()

        if await self._categories.find_one_by("name", name) is not None:
            raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name")

        parent_id = None
        if draft.parent is not None and draft.parent.strip():
            parent_id = require_identifier(draft.parent, "parent category", "parent")
            if await self._categories.get_by_id(CategoryId(parent_id)) is None:
                raise NotFoundError(
                    "Parent category does not exist", "Category", draft.parent,
                )

        try:
            category = await self._categories.insert({
                "name": name,
                "description": draft.description,
                "icon": draft.icon,
                "is_active": draft.is_active,
                "parent_id": parent_id,
                "sort_order": draft.sort_order,
            })
        except DuplicateRecordError as e:
            raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name") from e

        logger.info("Category created", extra={"category_id": category["id"]})
        return category

    async def list_categories(
        self, is_active: bool | None = None, parent: str | None = None,
    ) -> list[dict]:
        """Top-level categories unless a parent id is given."""
        parent_id = None
        if parent is not None and parent.strip():
            parent_id = require_identifier(parent, "parent category", "parent")
        return await self._categories.find_all(
            is_active=is_active, parent_id=parent_id,
        )

    async def get_category(self, raw_id: str) -> dict:
        category_id = CategoryId(require_identifier(raw_id, "category"))
        category = await self._categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found", "Category", raw_id)
        return category
