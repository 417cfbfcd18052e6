"""Transaction review API routes.

All routes act on the caller's review session (``X-Review-Session``).
"""

from fastapi import APIRouter, Depends, Header

from ledgerdesk.api.deps import get_backend, get_review_session, get_sessions, open_review_session
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.category import CategoryResolution
from ledgerdesk.schemas.review import CategoryAssignment, ReviewSnapshot
from ledgerdesk.schemas.rule import Rule, RuleOffer
from ledgerdesk.schemas.transaction import ManualCategoryRequest, ReviewSummary, Transaction
from ledgerdesk.services.client_service import ClientService
from ledgerdesk.services.export_service import ExportService
from ledgerdesk.services.review_service import ReviewService
from ledgerdesk.services.session import ReviewSession, SessionStore

router = APIRouter()


def _snapshot(session: ReviewSession) -> ReviewSnapshot:
    client = session.client
    return ReviewSnapshot(
        client=client,
        workflow=ClientService.workflow_for(client) if client else None,
        export_controls=ExportService.controls_for(client) if client else None,
        categories=session.categories,
        transactions=list(session.transactions.values()),
        summary=ReviewService.summary(session),
    )


@router.post("/select/{client_id}", response_model=ReviewSnapshot)
async def select_client(
    client_id: str,
    session: ReviewSession = Depends(open_review_session),
    backend: BackendClient = Depends(get_backend),
):
    """Select a client and load its categories and transactions.

    When selections overlap the last one started wins, whatever order the
    client lookups come back in.
    """
    token = session.begin_selection()
    client = await ClientService(backend).get_client(client_id)
    await ReviewService(backend).select_client(session, client, token)
    return _snapshot(session)


@router.get("", response_model=ReviewSnapshot)
async def get_snapshot(session: ReviewSession = Depends(get_review_session)):
    return _snapshot(session)


@router.get("/categories", response_model=CategoryResolution)
async def get_categories(session: ReviewSession = Depends(get_review_session)):
    return session.categories


@router.post("/categories/refresh", response_model=CategoryResolution)
async def refresh_categories(
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    """Resolve the selected client's categories again."""
    return await ReviewService(backend).resolver.refresh(session)


@router.get("/transactions", response_model=list[Transaction])
async def list_transactions(
    reload: bool = False,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    if reload:
        return await ReviewService(backend).load_transactions(session)
    return list(session.transactions.values())


@router.put("/transactions/{transaction_id}/category", response_model=CategoryAssignment)
async def assign_category(
    transaction_id: str,
    data: ManualCategoryRequest,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    """Set the manual category; the response carries the rule offer, if any."""
    transaction, offer = await ReviewService(backend).assign_manual_category(
        session, transaction_id, data.category
    )
    return CategoryAssignment(transaction=transaction, rule_offer=offer)


@router.post("/transactions/{transaction_id}/approval", response_model=Transaction)
async def toggle_approval(
    transaction_id: str,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    return await ReviewService(backend).toggle_approval(session, transaction_id)


@router.get("/rule-offers", response_model=list[RuleOffer])
async def list_rule_offers(session: ReviewSession = Depends(get_review_session)):
    return list(session.rule_offers.values())


@router.post("/rule-offers/{offer_id}/accept", response_model=list[Rule])
async def accept_rule_offer(
    offer_id: str,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    """Create the offered rule and return the client's refreshed rules."""
    return await ReviewService(backend).accept_rule_offer(session, offer_id)


@router.post("/rule-offers/{offer_id}/decline", status_code=204)
async def decline_rule_offer(
    offer_id: str,
    session: ReviewSession = Depends(get_review_session),
    backend: BackendClient = Depends(get_backend),
):
    ReviewService(backend).decline_rule_offer(session, offer_id)


@router.get("/summary", response_model=ReviewSummary)
async def get_summary(session: ReviewSession = Depends(get_review_session)):
    return ReviewService.summary(session)


@router.delete("", status_code=204)
async def end_review(
    x_review_session: str = Header("default"),
    sessions: SessionStore = Depends(get_sessions),
):
    """Forget the caller's review session."""
    sessions.drop(x_review_session)
