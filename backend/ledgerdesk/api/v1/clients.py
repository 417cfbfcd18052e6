"""Client registry API routes."""

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.client import Client, ClientCreate, ClientUpdate, ClientWorkflow
from ledgerdesk.services.client_service import ClientService

router = APIRouter()


@router.get("", response_model=list[Client])
async def list_clients(backend: BackendClient = Depends(get_backend)):
    """List all clients."""
    return await ClientService(backend).list_clients()


@router.post("", response_model=Client, status_code=201)
async def create_client(data: ClientCreate, backend: BackendClient = Depends(get_backend)):
    """Create a client. Desktop clients must come with a Chart of Accounts file."""
    return await ClientService(backend).create_client(data)


@router.put("/{client_id}", response_model=Client)
async def update_client(client_id: str, data: ClientUpdate, backend: BackendClient = Depends(get_backend)):
    return await ClientService(backend).update_client(client_id, data)


@router.delete("/{client_id}", status_code=204)
async def delete_client(client_id: str, backend: BackendClient = Depends(get_backend)):
    await ClientService(backend).delete_client(client_id)


@router.get("/{client_id}/workflow", response_model=ClientWorkflow)
async def get_client_workflow(client_id: str, backend: BackendClient = Depends(get_backend)):
    """Category source and export method for a client."""
    service = ClientService(backend)
    return service.workflow_for(await service.get_client(client_id))
