"""Export API routes: QuickBooks Online push and QuickBooks Desktop IIF."""

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend, get_review_session
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.responses import attachment
from ledgerdesk.schemas.export import ExportControls, IifExportRequest, PushOutcome, PushRequest, PushResponse, PushStatus
from ledgerdesk.services.export_service import ExportService
from ledgerdesk.services.session import ReviewSession

router = APIRouter()


@router.get("/controls", response_model=ExportControls)
async def get_controls(session: ReviewSession = Depends(get_review_session)):
    """The single export control offered for the selected client."""
    return ExportService.controls_for(session.require_client())


@router.post("/qbo/push", response_model=PushResponse)
async def push_to_quickbooks(
    data: PushRequest,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    outcomes = await ExportService(backend).push_to_quickbooks(
        session, transaction_ids=data.transaction_ids, upload_id=data.upload_id
    )
    return PushResponse(
        outcomes=outcomes,
        ok_count=sum(1 for o in outcomes if o.status == PushStatus.OK),
        skipped_count=sum(1 for o in outcomes if o.status == PushStatus.SKIPPED),
        error_count=sum(1 for o in outcomes if o.status == PushStatus.ERROR),
    )


@router.get("/qbo/outcomes", response_model=list[PushOutcome])
async def list_push_outcomes(session: ReviewSession = Depends(get_review_session)):
    """Last known push outcome per transaction of the selected client."""
    return list(session.push_outcomes.values())


@router.post("/qbd/iif")
async def export_iif(
    data: IifExportRequest,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    """Download the IIF file for the selected desktop client."""
    export = await ExportService(backend).export_iif(
        session, data.register_account_name, transaction_ids=data.transaction_ids
    )
    return attachment(
        export.content,
        export.filename,
        export.media_type,
        headers={"X-Transaction-Count": str(export.transaction_count)},
    )
