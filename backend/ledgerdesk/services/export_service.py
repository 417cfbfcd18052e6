"""Export dispatcher.

QuickBooks Online clients push approved transactions through the backend's
QBO integration; QuickBooks Desktop clients download an IIF file generated by
the backend. A client gets exactly one of the two.
"""

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import BackendError, ReconnectRequiredError, ValidationError
from ledgerdesk.schemas.client import AccountType, Client
from ledgerdesk.schemas.export import ExportControls, ExportFile, PushOutcome, PushResultItem, PushStatus
from ledgerdesk.services.session import ReviewSession

logger = structlog.get_logger()


def iif_filename(client_name: str) -> str:
    return f"{client_name}_transactions.iif"


class ExportService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    @staticmethod
    def controls_for(client: Client) -> ExportControls:
        if client.account_type == AccountType.ONLINE:
            return ExportControls(method="qbo_push", requires_register_account_name=False)
        if client.account_type == AccountType.DESKTOP:
            return ExportControls(method="iif", requires_register_account_name=True)
        return ExportControls(method=None)

    # ── QuickBooks Online ──────────────────────────────

    async def push_to_quickbooks(
        self,
        session: ReviewSession,
        transaction_ids: list[str] | None = None,
        upload_id: str | None = None,
    ) -> list[PushOutcome]:
        """Push approved transactions to QuickBooks Online.

        Args:
            session: Review session with an online client selected.
            transaction_ids: Restrict the push to these ids; unapproved ids
                are dropped. Defaults to every approved transaction.
            upload_id: Ask the backend to push everything approved in this
                upload instead of sending an id list.

        Returns:
            One outcome per result the backend reported, keyed back onto the
            session's transactions by id.

        Raises:
            ValidationError: not an online client, or nothing to push.
            ReconnectRequiredError: the stored QuickBooks token has expired.
            BackendError: any other failure.
        """
        client = session.require_client()
        if client.account_type != AccountType.ONLINE:
            raise ValidationError("QuickBooks push is only available for QuickBooks Online clients")

        if upload_id:
            payload = {"uploadId": upload_id, "pushAllApproved": True}
        else:
            approved = self._approved_ids(session, transaction_ids)
            if not approved:
                raise ValidationError("No approved transactions to push")
            payload = {"transactionIds": approved}

        token = session.selection_token
        with session.export_lock():
            try:
                data = await self.backend.post_json(
                    f"/api/qbo/{client.id}/push",
                    payload,
                    fallback="Error pushing transactions",
                )
            except BackendError as e:
                if e.upstream_status == 401:
                    logger.warning("qbo_reconnect_required", client_id=client.id)
                    raise ReconnectRequiredError() from e
                raise

        outcomes = self.reconcile(data)
        if session.is_current(token, client.id):
            self._apply(session, outcomes)

        logger.info(
            "qbo_push_completed",
            client_id=client.id,
            ok=sum(1 for o in outcomes if o.status == PushStatus.OK),
            skipped=sum(1 for o in outcomes if o.status == PushStatus.SKIPPED),
            errors=sum(1 for o in outcomes if o.status == PushStatus.ERROR),
        )
        return outcomes

    @staticmethod
    def reconcile(data) -> list[PushOutcome]:
        """Turn the backend's push results into outcomes keyed by transaction id.

        Items that cannot be tied to a transaction are logged and skipped; the
        push already happened, so the rest of the batch is still reported.
        """
        results = data.get("results") if isinstance(data, dict) else None
        outcomes = []
        for index, raw in enumerate(results or []):
            try:
                item = PushResultItem.model_validate(raw)
            except ValueError as e:
                logger.warning("qbo_push_result_unreadable", index=index, error=str(e))
                continue
            outcomes.append(
                PushOutcome(
                    transaction_id=item.transaction_id,
                    status=item.status,
                    qbo_txn_id=item.qbo_txn_id,
                    error=item.error if item.status == PushStatus.ERROR else None,
                )
            )
        return outcomes

    @staticmethod
    def _approved_ids(session: ReviewSession, transaction_ids: list[str] | None) -> list[str]:
        approved = [txn.id for txn in session.transactions.values() if txn.ready_for_export]
        if transaction_ids is None:
            return approved
        wanted = set(transaction_ids)
        return [txn_id for txn_id in approved if txn_id in wanted]

    @staticmethod
    def _apply(session: ReviewSession, outcomes: list[PushOutcome]) -> None:
        for outcome in outcomes:
            session.push_outcomes[outcome.transaction_id] = outcome
            txn = session.transactions.get(outcome.transaction_id)
            if txn is not None and outcome.status != PushStatus.ERROR and outcome.qbo_txn_id:
                session.transactions[txn.id] = txn.model_copy(update={"qb_id": outcome.qbo_txn_id})

    # ── QuickBooks Desktop ─────────────────────────────

    async def export_iif(
        self,
        session: ReviewSession,
        register_account_name: str,
        transaction_ids: list[str] | None = None,
    ) -> ExportFile:
        """Generate the IIF file for the approved transactions of a desktop client.

        ``transaction_ids`` narrows the export to a subset; unapproved ids are
        dropped.
        """
        client = session.require_client()
        if client.account_type != AccountType.DESKTOP:
            raise ValidationError("IIF export is only available for QuickBooks Desktop clients")

        register_account_name = (register_account_name or "").strip()
        if not register_account_name:
            raise ValidationError("Enter the register account name used in QuickBooks Desktop")

        approved = self._approved_ids(session, transaction_ids)
        if not approved:
            raise ValidationError("No approved transactions to export")

        with session.export_lock():
            response = await self.backend.request(
                "POST",
                f"/export/qbd/{client.id}/iif",
                json={
                    "transaction_ids": approved,
                    "register_account_name": register_account_name,
                },
                fallback="Failed to export to QuickBooks Desktop",
            )

        logger.info("iif_exported", client_id=client.id, transactions=len(approved))
        return ExportFile(
            filename=iif_filename(client.name),
            content=response.content,
            media_type=response.headers.get("content-type", "application/octet-stream"),
            transaction_count=len(approved),
        )
