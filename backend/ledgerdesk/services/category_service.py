"""Firm-wide category list management."""

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import ValidationError
from ledgerdesk.schemas.category import Category, CategoryCreate, CategoryUpdate

logger = structlog.get_logger()


def _required_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    return name


class CategoryService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def list_categories(self) -> list[Category]:
        data = await self.backend.get_json("/categories", fallback="Failed to fetch categories")
        return [Category.model_validate(item) for item in data or []]

    async def create_category(self, data: CategoryCreate) -> list[Category]:
        """Create a category and return the refreshed list."""
        name = _required_name(data.name)
        await self.backend.post_json("/categories", {"name": name}, fallback="Error saving category")
        logger.info("category_created", name=name)
        return await self.list_categories()

    async def update_category(self, category_id: str, data: CategoryUpdate) -> list[Category]:
        name = _required_name(data.name)
        await self.backend.put_json(f"/categories/{category_id}", {"name": name}, fallback="Error saving category")
        logger.info("category_updated", category_id=category_id, name=name)
        return await self.list_categories()

    async def delete_category(self, category_id: str) -> list[Category]:
        await self.backend.delete(f"/categories/{category_id}", fallback="Error deleting category")
        logger.info("category_deleted", category_id=category_id)
        return await self.list_categories()
