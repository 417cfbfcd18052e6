"""Category list API routes."""

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.category import Category, CategoryCreate, CategoryUpdate
from ledgerdesk.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=list[Category])
async def list_categories(backend: BackendClient = Depends(get_backend)):
    return await CategoryService(backend).list_categories()


@router.post("", response_model=list[Category], status_code=201)
async def create_category(data: CategoryCreate, backend: BackendClient = Depends(get_backend)):
    """Add a category; returns the refreshed list."""
    return await CategoryService(backend).create_category(data)


@router.put("/{category_id}", response_model=list[Category])
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    backend: BackendClient = Depends(get_backend),
):
    """Rename a category."""
    return await CategoryService(backend).update_category(category_id, data)


@router.delete("/{category_id}", response_model=list[Category])
async def delete_category(category_id: str, backend: BackendClient = Depends(get_backend)):
    return await CategoryService(backend).delete_category(category_id)
