"""Statement upload service."""

from pathlib import PurePath

import structlog

from ledgerdesk.config import settings
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import BackendError, ValidationError
from ledgerdesk.schemas.client import Client
from ledgerdesk.schemas.transaction import Transaction
from ledgerdesk.schemas.upload import Upload

logger = structlog.get_logger()


class UploadService:
    def __init__(
        self,
        backend: BackendClient,
        max_upload_size_mb: int = settings.max_upload_size_mb,
        allowed_extensions: list[str] | None = None,
    ):
        self.backend = backend
        self.max_upload_size_mb = max_upload_size_mb
        self.allowed_extensions = allowed_extensions or settings.allowed_upload_extensions_list

    def validate_file(self, filename: str, size: int) -> None:
        """Reject unsupported or oversized files before they are sent."""
        extension = PurePath(filename or "").suffix.lower()
        if extension not in self.allowed_extensions:
            allowed = ", ".join(ext.lstrip(".").upper() for ext in self.allowed_extensions)
            raise ValidationError(f"File must be {allowed} format only.")
        if size > self.max_upload_size_mb * 1024 * 1024:
            raise ValidationError(f"File must be under {self.max_upload_size_mb}MB.")
        if size == 0:
            raise ValidationError("File is empty.")

    async def upload(
        self,
        filename: str,
        content: bytes,
        client_id: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> Upload:
        self.validate_file(filename, len(content))
        data = {"client_id": client_id} if client_id else None
        response = await self.backend.request(
            "POST",
            "/uploads",
            files={"file": (filename, content, content_type)},
            data=data,
            fallback="Failed to upload file",
        )
        try:
            upload = Upload.model_validate(response.json())
        except ValueError as e:
            raise BackendError("Unexpected response to the upload") from e
        logger.info("statement_uploaded", upload_id=upload.id, filename=filename, client_id=client_id)
        return upload

    async def list_uploads(self) -> list[Upload]:
        data = await self.backend.get_json("/uploads", fallback="Failed to load uploads")
        return [Upload.model_validate(item) for item in data or []]

    async def list_upload_transactions(self, upload_id: str) -> list[Transaction]:
        """Transactions parsed from one statement, for the upload views."""
        data = await self.backend.get_json(
            f"/transactions/{upload_id}",
            fallback="Failed to load transactions for this upload",
        )
        return [Transaction.model_validate(item) for item in data or []]

    @staticmethod
    def detect_client(filename: str, clients: list[Client]) -> Client | None:
        """Guess the client from a statement filename by its first name word."""
        lower_name = (filename or "").lower()
        for client in clients:
            words = client.name.lower().split()
            if words and words[0] in lower_name:
                return client
        return None
