"""Category source resolution.

Online clients categorize against the live QuickBooks chart of accounts;
desktop clients against the rows of their most recently uploaded Chart of
Accounts file. Resolution never raises: failures come back as an empty list
with a retryable error.
"""

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import BackendError
from ledgerdesk.schemas.category import CategoryOption, CategoryResolution, CategorySource
from ledgerdesk.schemas.client import AccountType, Client
from ledgerdesk.services.session import ReviewSession

logger = structlog.get_logger()

# Column names as exported by QuickBooks Desktop, then the backend's own keys
COA_COLUMNS = {
    "number": ("Accnt. #", "Account #", "number", "account_number"),
    "name": ("Account", "name", "account_name"),
    "type": ("Type", "type", "account_type"),
    "detail_type": ("Detail Type", "detailType", "detail_type"),
    "balance": ("Balance Total", "Balance", "balance"),
}


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pick(row: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = _text(row.get(key))
        if value is not None:
            return value
    return None


def qbo_account_option(account: dict) -> CategoryOption:
    """Map a QuickBooks Online account to a category option."""
    name = _pick(account, ("name", "Name")) or ""
    full_name = _pick(account, ("fullyQualifiedName", "FullyQualifiedName")) or name
    return CategoryOption(
        id=_pick(account, ("id", "Id", "_id")) or full_name,
        name=full_name,
        number=_pick(account, ("number", "AcctNum", "acctNum")),
        type=_pick(account, ("type", "AccountType")),
        detail_type=_pick(account, ("subType", "AccountSubType")),
        display_text=full_name,
        source=CategorySource.QBO_ACCOUNTS,
    )


def coa_row_option(row: dict, index: int) -> CategoryOption | None:
    """Map a Chart of Accounts row; rows without an account name are skipped."""
    name = _pick(row, COA_COLUMNS["name"])
    if name is None:
        return None
    number = _pick(row, COA_COLUMNS["number"])
    return CategoryOption(
        id=_pick(row, ("_id", "id")) or f"coa-{index}",
        name=name,
        number=number,
        type=_pick(row, COA_COLUMNS["type"]),
        detail_type=_pick(row, COA_COLUMNS["detail_type"]),
        balance=_pick(row, COA_COLUMNS["balance"]),
        display_text=f"{number} - {name}" if number else name,
        source=CategorySource.COA_FILE,
    )


def _rows(data, key: str) -> list[dict]:
    if isinstance(data, dict):
        data = data.get(key) or []
    return [row for row in data or [] if isinstance(row, dict)]


class CategoryResolver:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def resolve(self, session: ReviewSession, client: Client | None = None) -> CategoryResolution:
        """Resolve categories for a client and commit them if still selected."""
        client = client or session.require_client()
        token = session.selection_token

        result = await self.fetch(client)

        if not session.is_current(token, client.id):
            logger.info(
                "category_resolve_stale",
                session=session.id,
                client_id=client.id,
                current_client_id=session.client.id if session.client else None,
            )
            return result.model_copy(update={"stale": True})

        session.categories = result
        return result

    async def refresh(self, session: ReviewSession) -> CategoryResolution:
        """Re-run resolution for the currently selected client."""
        return await self.resolve(session, session.require_client())

    async def fetch(self, client: Client) -> CategoryResolution:
        if client.account_type == AccountType.ONLINE:
            source = CategorySource.QBO_ACCOUNTS
        elif client.account_type == AccountType.DESKTOP:
            source = CategorySource.COA_FILE
        else:
            logger.warning("category_source_unknown", client_id=client.id)
            return CategoryResolution(
                client_id=client.id,
                error="This client has no QuickBooks account type; categories are unavailable.",
            )

        try:
            if source == CategorySource.QBO_ACCOUNTS:
                categories = await self._fetch_qbo_accounts(client)
            else:
                categories = await self._fetch_coa_rows(client)
        except (BackendError, ValueError) as e:
            message = e.detail if isinstance(e, BackendError) else "Unexpected category data from the server"
            logger.warning(
                "category_resolve_failed",
                client_id=client.id,
                source=source.value,
                error=message,
            )
            return CategoryResolution(
                client_id=client.id,
                source=source,
                error=message,
                needs_coa_upload=source == CategorySource.COA_FILE,
            )

        logger.info(
            "categories_resolved",
            client_id=client.id,
            source=source.value,
            count=len(categories),
        )
        return CategoryResolution(
            client_id=client.id,
            source=source,
            categories=categories,
            needs_coa_upload=source == CategorySource.COA_FILE and not categories,
        )

    async def _fetch_qbo_accounts(self, client: Client) -> list[CategoryOption]:
        data = await self.backend.get_json(
            f"/api/qbo/{client.id}/accounts",
            fallback="Failed to load QuickBooks accounts",
        )
        return [qbo_account_option(account) for account in _rows(data, "accounts")]

    async def _fetch_coa_rows(self, client: Client) -> list[CategoryOption]:
        data = await self.backend.get_json(
            f"/coa/{client.id}/data",
            fallback="Failed to load COA categories",
        )
        options = (coa_row_option(row, i) for i, row in enumerate(_rows(data, "data")))
        return [option for option in options if option is not None]
