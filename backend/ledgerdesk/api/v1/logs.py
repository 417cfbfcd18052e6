"""Audit log API routes."""

from datetime import date

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.responses import attachment
from ledgerdesk.schemas.audit import LogEntry, RollbackResult
from ledgerdesk.services.audit_service import AuditService

router = APIRouter()


@router.get("", response_model=list[LogEntry])
async def list_logs(
    user: str | None = None,
    on_date: date | None = None,
    action: str | None = None,
    target_type: str | None = None,
    search: str | None = None,
    backend: BackendClient = Depends(get_backend),
):
    service = AuditService(backend)
    entries = await service.list_logs(user=user, on_date=on_date, action=action)
    return service.filter_logs(entries, search=search, target_type=target_type)


@router.get("/export")
async def export_logs(
    user: str | None = None,
    on_date: date | None = None,
    action: str | None = None,
    target_type: str | None = None,
    search: str | None = None,
    backend: BackendClient = Depends(get_backend),
):
    """Download the filtered audit trail as CSV."""
    service = AuditService(backend)
    entries = await service.list_logs(user=user, on_date=on_date, action=action)
    filename, content = service.export_csv(
        service.filter_logs(entries, search=search, target_type=target_type)
    )
    return attachment(content, filename, "text/csv; charset=utf-8")


@router.post("/rollback/{upload_id}", response_model=RollbackResult)
async def rollback_upload(upload_id: str, backend: BackendClient = Depends(get_backend)):
    return await AuditService(backend).rollback(upload_id)
