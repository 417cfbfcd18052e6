"""Client registry service."""

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import NotFoundError
from ledgerdesk.schemas.client import AccountType, Client, ClientCreate, ClientUpdate, ClientWorkflow

logger = structlog.get_logger()


class ClientService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def list_clients(self) -> list[Client]:
        data = await self.backend.get_json("/clients", fallback="Failed to load clients")
        return [Client.model_validate(item) for item in data or []]

    async def get_client(self, client_id: str) -> Client:
        """Look a client up in the registry listing."""
        for client in await self.list_clients():
            if client.id == client_id:
                return client
        raise NotFoundError("Client")

    async def create_client(self, data: ClientCreate) -> Client:
        payload = data.model_dump(mode="json", exclude_none=True)
        # Legacy endpoints read the type from qb_type
        payload["qb_type"] = payload["account_type"]
        created = await self.backend.post_json("/clients", payload, fallback="Error saving client")
        client = Client.model_validate(created)
        logger.info("client_created", client_id=client.id, account_type=data.account_type.value)
        return client

    async def update_client(self, client_id: str, data: ClientUpdate) -> Client:
        """Update editable fields. The account type is never sent."""
        update_data = data.model_dump(exclude_unset=True)
        updated = await self.backend.put_json(f"/clients/{client_id}", update_data, fallback="Error saving client")
        logger.info("client_updated", client_id=client_id, fields=sorted(update_data))
        if isinstance(updated, dict) and updated:
            return Client.model_validate(updated)
        return await self.get_client(client_id)

    async def delete_client(self, client_id: str) -> None:
        await self.backend.delete(f"/clients/{client_id}", fallback="Failed to delete client")
        logger.info("client_deleted", client_id=client_id)

    @staticmethod
    def workflow_for(client: Client) -> ClientWorkflow:
        """Derive the category source and export method from the account type."""
        if client.account_type == AccountType.ONLINE:
            return ClientWorkflow(
                account_type=client.account_type,
                category_source="qbo_accounts",
                export_method="qbo_push",
                needs_coa=False,
            )
        if client.account_type == AccountType.DESKTOP:
            return ClientWorkflow(
                account_type=client.account_type,
                category_source="coa_file",
                export_method="iif",
                needs_coa=True,
            )
        return ClientWorkflow(account_type=None, category_source=None, export_method=None, needs_coa=False)
