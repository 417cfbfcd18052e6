"""Transaction review workflow.

Transactions move through needs review / auto categorized / manually
categorized / approved. Local state only changes after the backend has
confirmed the update, and each successful manual categorization produces one
rule offer the reviewer can accept or decline.
"""

import asyncio
import uuid

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import NotFoundError, ValidationError
from ledgerdesk.schemas.category import CategoryResolution
from ledgerdesk.schemas.client import Client
from ledgerdesk.schemas.rule import Rule, RuleOffer
from ledgerdesk.schemas.transaction import ReviewState, ReviewSummary, Transaction, TransactionUpdate
from ledgerdesk.services.category_resolver import CategoryResolver
from ledgerdesk.services.rule_service import RuleService
from ledgerdesk.services.session import ReviewSession

logger = structlog.get_logger()


class ReviewService:
    def __init__(
        self,
        backend: BackendClient,
        resolver: CategoryResolver | None = None,
        rules: RuleService | None = None,
    ):
        self.backend = backend
        self.resolver = resolver or CategoryResolver(backend)
        self.rules = rules or RuleService(backend)

    # ── Selection ──────────────────────────────────────

    async def select_client(
        self, session: ReviewSession, client: Client, token: int | None = None
    ) -> CategoryResolution | None:
        """Select a client and load its categories and transactions.

        ``token`` comes from ``session.begin_selection()`` when the selection
        started before the client was known. Returns ``None`` without loading
        anything if a later selection has started in the meantime.
        """
        if not session.select(client, token):
            return None
        logger.info(
            "client_selected",
            session=session.id,
            client_id=client.id,
            account_type=client.account_type.value if client.account_type else None,
        )
        categories, _ = await asyncio.gather(
            self.resolver.resolve(session, client),
            self.load_transactions(session, client),
        )
        return categories

    async def load_transactions(self, session: ReviewSession, client: Client | None = None) -> list[Transaction]:
        """Fetch the client's transactions; committed only if still selected."""
        client = client or session.require_client()
        token = session.selection_token

        data = await self.backend.get_json(
            f"/transactions/client/{client.id}",
            fallback=f"Failed to load transactions for {client.name}",
        )
        transactions = [Transaction.model_validate(item) for item in data or []]

        if not session.is_current(token, client.id):
            logger.info("transactions_load_stale", session=session.id, client_id=client.id)
            return transactions

        session.transactions = {txn.id: txn for txn in transactions}
        return transactions

    # ── Transitions ────────────────────────────────────

    async def assign_manual_category(
        self, session: ReviewSession, transaction_id: str, label: str
    ) -> tuple[Transaction, RuleOffer | None]:
        """Set a transaction's manual category.

        The label must be one of the categories resolved for the selected
        client. Approval is left as it was. On success a rule offer for the
        transaction's vendor is registered on the session and returned.
        """
        client = session.require_client()
        txn = session.get_transaction(transaction_id)
        label = (label or "").strip()

        resolved = session.categories
        labels = {option.label for option in resolved.categories} if resolved.client_id == client.id else set()
        if label not in labels:
            raise ValidationError(f"'{label}' is not an available category for {client.name}")

        token = session.selection_token
        update = TransactionUpdate(manual_category=label)
        data = await self.backend.patch_json(
            f"/transactions/{txn.id}",
            update.model_dump(exclude_unset=True),
            fallback="Failed to update category",
        )
        updated = self._confirmed(txn, data, manual_category=label)

        if not session.is_current(token, client.id):
            return updated, None

        session.transactions[updated.id] = updated
        logger.info(
            "manual_category_assigned",
            transaction_id=updated.id,
            client_id=client.id,
            category=label,
        )

        offer = None
        if updated.vendor_name.strip():
            offer = RuleOffer(
                id=uuid.uuid4().hex,
                transaction_id=updated.id,
                client_id=client.id,
                vendor_contains=updated.vendor_name.strip(),
                map_to_account=label,
            )
            session.rule_offers[offer.id] = offer
            logger.info("rule_offer_created", offer_id=offer.id, transaction_id=updated.id)
        return updated, offer

    async def toggle_approval(self, session: ReviewSession, transaction_id: str) -> Transaction:
        """Flip a transaction's approval. No category is required."""
        client = session.require_client()
        txn = session.get_transaction(transaction_id)
        approved = not txn.approved

        token = session.selection_token
        data = await self.backend.patch_json(
            f"/transactions/{txn.id}",
            TransactionUpdate(approved=approved).model_dump(exclude_unset=True),
            fallback="Failed to update transaction",
        )
        updated = self._confirmed(txn, data, approved=approved)

        if session.is_current(token, client.id):
            session.transactions[updated.id] = updated
            logger.info(
                "approval_toggled",
                transaction_id=updated.id,
                approved=updated.approved,
                uncategorized=updated.effective_category is None,
            )
        return updated

    # ── Rule offers ────────────────────────────────────

    async def accept_rule_offer(self, session: ReviewSession, offer_id: str) -> list[Rule]:
        """Create the offered rule. The categorization stays as it is either way."""
        offer = self._take_offer(session, offer_id)
        return await self.rules.create_rule(offer.client_id, offer.vendor_contains, offer.map_to_account)

    def decline_rule_offer(self, session: ReviewSession, offer_id: str) -> None:
        offer = self._take_offer(session, offer_id)
        logger.info("rule_offer_declined", offer_id=offer.id, transaction_id=offer.transaction_id)

    # ── Helpers ─────────────────────────────────────────

    @staticmethod
    def summary(session: ReviewSession) -> ReviewSummary:
        transactions = list(session.transactions.values())
        approved = sum(1 for txn in transactions if txn.approved)
        return ReviewSummary(
            total=len(transactions),
            approved=approved,
            pending=len(transactions) - approved,
            pushed=sum(1 for txn in transactions if txn.qb_id),
            needs_review=sum(1 for txn in transactions if txn.review_state == ReviewState.NEEDS_REVIEW),
        )

    @staticmethod
    def _take_offer(session: ReviewSession, offer_id: str) -> RuleOffer:
        offer = session.rule_offers.pop(offer_id, None)
        if offer is None:
            raise NotFoundError("Rule offer")
        return offer

    @staticmethod
    def _confirmed(txn: Transaction, data, **confirmed) -> Transaction:
        """Prefer the backend's copy of the transaction; fall back to the sent fields."""
        if isinstance(data, dict) and any(k in data for k in ("transaction_id", "_id", "id")):
            return Transaction.model_validate(data)
        return txn.model_copy(update=confirmed)
