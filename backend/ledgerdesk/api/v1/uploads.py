"""Statement upload API routes."""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.client import Client
from ledgerdesk.schemas.transaction import Transaction
from ledgerdesk.schemas.upload import Upload
from ledgerdesk.services.client_service import ClientService
from ledgerdesk.services.upload_service import UploadService

router = APIRouter()


@router.get("", response_model=list[Upload])
async def list_uploads(backend: BackendClient = Depends(get_backend)):
    return await UploadService(backend).list_uploads()


@router.post("", response_model=Upload, status_code=201)
async def upload_statement(
    file: UploadFile = File(...),
    client_id: str | None = Form(None),
    backend: BackendClient = Depends(get_backend),
):
    """Submit a bank statement; the backend parses it asynchronously."""
    content = await file.read()
    return await UploadService(backend).upload(
        file.filename or "statement",
        content,
        client_id=client_id,
        content_type=file.content_type or "application/octet-stream",
    )


@router.get("/detect-client", response_model=Client | None)
async def detect_client(filename: str, backend: BackendClient = Depends(get_backend)):
    """Guess which client a statement belongs to from its filename."""
    clients = await ClientService(backend).list_clients()
    return UploadService.detect_client(filename, clients)


@router.get("/{upload_id}/transactions", response_model=list[Transaction])
async def list_upload_transactions(upload_id: str, backend: BackendClient = Depends(get_backend)):
    return await UploadService(backend).list_upload_transactions(upload_id)
