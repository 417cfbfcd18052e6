"""QuickBooks Online connection API routes."""

from typing import Literal

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.quickbooks import ConnectLink, QBOKeys, QBOStatus, RegisterAccount, RegisterSelection
from ledgerdesk.services.quickbooks_service import QuickBooksService

router = APIRouter()


@router.post("/{client_id}/keys", response_model=QBOStatus)
async def save_keys(client_id: str, keys: QBOKeys, backend: BackendClient = Depends(get_backend)):
    """Store the client's QuickBooks app credentials."""
    return await QuickBooksService(backend).save_keys(client_id, keys)


@router.get("/{client_id}/status", response_model=QBOStatus)
async def get_status(client_id: str, backend: BackendClient = Depends(get_backend)):
    return await QuickBooksService(backend).status(client_id)


@router.get("/{client_id}/connect", response_model=ConnectLink)
async def get_connect_link(client_id: str, backend: BackendClient = Depends(get_backend)):
    return ConnectLink(url=QuickBooksService(backend).connect_url(client_id))


@router.post("/{client_id}/disconnect", response_model=QBOStatus)
async def disconnect(
    client_id: str,
    token_type: Literal["refresh", "access"] = "refresh",
    backend: BackendClient = Depends(get_backend),
):
    return await QuickBooksService(backend).disconnect(client_id, token_type)


@router.get("/{client_id}/register-accounts", response_model=list[RegisterAccount])
async def list_register_accounts(client_id: str, backend: BackendClient = Depends(get_backend)):
    """Bank and credit card accounts usable as a push register."""
    return await QuickBooksService(backend).register_accounts(client_id)


@router.post("/{client_id}/uploads/{upload_id}/register", status_code=204)
async def set_register(
    client_id: str,
    upload_id: str,
    selection: RegisterSelection,
    backend: BackendClient = Depends(get_backend),
):
    await QuickBooksService(backend).set_register(client_id, upload_id, selection)
