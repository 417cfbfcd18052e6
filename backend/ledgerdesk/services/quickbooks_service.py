"""QuickBooks Online connection management.

The OAuth exchange itself happens on the backend; this service stores the
app keys, reads the connection status and picks register accounts.
"""

from typing import Literal

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.quickbooks import QBOKeys, QBOStatus, RegisterAccount, RegisterSelection

logger = structlog.get_logger()


class QuickBooksService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def save_keys(self, client_id: str, keys: QBOKeys) -> QBOStatus:
        await self.backend.post_json(f"/api/qbo/{client_id}/keys", keys.model_dump(), fallback="Failed to save keys")
        logger.info("qbo_keys_saved", client_id=client_id)
        return await self.status(client_id)

    async def status(self, client_id: str) -> QBOStatus:
        data = await self.backend.get_json(f"/api/qbo/{client_id}/status", fallback="Failed to load QuickBooks status")
        return QBOStatus.model_validate(data or {})

    def connect_url(self, client_id: str) -> str:
        """URL of the Intuit consent flow, opened by the user's browser."""
        return self.backend.url_for(f"/api/qbo/{client_id}/connect")

    async def disconnect(self, client_id: str, token_type: Literal["refresh", "access"] = "refresh") -> QBOStatus:
        await self.backend.post_json(
            f"/api/qbo/{client_id}/disconnect",
            {"tokenType": token_type},
            fallback="Failed to disconnect from QuickBooks",
        )
        logger.info("qbo_disconnected", client_id=client_id, token_type=token_type)
        return QBOStatus(connected=False)

    async def register_accounts(self, client_id: str) -> list[RegisterAccount]:
        data = await self.backend.get_json(
            f"/api/qbo/{client_id}/register-accounts",
            fallback="Failed to load register accounts",
        )
        return [RegisterAccount.model_validate(item) for item in data or []]

    async def set_register(self, client_id: str, upload_id: str, selection: RegisterSelection) -> None:
        await self.backend.post_json(
            f"/api/qbo/{client_id}/uploads/{upload_id}/register",
            selection.model_dump(),
            fallback="Failed to set register account",
        )
        logger.info(
            "qbo_register_set",
            client_id=client_id,
            upload_id=upload_id,
            register_account_id=selection.qbo_register_account_id,
        )
