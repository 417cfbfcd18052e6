"""Audit log access: listing, local filtering, CSV export and rollback."""

import csv
import io
from datetime import date

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.audit import LogEntry, RollbackResult

logger = structlog.get_logger()

CSV_HEADER = ["Timestamp", "User", "Action", "Target Type", "Target ID", "Details"]


class AuditService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def list_logs(
        self,
        user: str | None = None,
        on_date: date | None = None,
        action: str | None = None,
    ) -> list[LogEntry]:
        """Fetch audit entries; filters are applied by the backend."""
        params = {
            "user": user,
            "date": on_date.isoformat() if on_date else None,
            "action": action,
        }
        data = await self.backend.get_json("/logs", params=params, fallback="Failed to load logs")
        return [LogEntry.model_validate(item) for item in data or []]

    async def rollback(self, upload_id: str) -> RollbackResult:
        data = await self.backend.post_json(f"/rollback/{upload_id}", fallback="Rollback failed")
        logger.info("upload_rolled_back", upload_id=upload_id)
        message = data.get("message") if isinstance(data, dict) else None
        return RollbackResult(message=message or "Rollback complete")

    @staticmethod
    def filter_logs(
        entries: list[LogEntry],
        search: str | None = None,
        action: str | None = None,
        target_type: str | None = None,
    ) -> list[LogEntry]:
        """Free-text search over details, user and action, plus exact filters."""
        needle = (search or "").lower()
        return [
            entry
            for entry in entries
            if (
                not needle
                or needle in entry.details.lower()
                or needle in entry.user_name.lower()
                or needle in entry.action_type.lower()
            )
            and (not action or entry.action_type == action)
            and (not target_type or entry.target_type == target_type)
        ]

    @staticmethod
    def export_csv(entries: list[LogEntry], today: date | None = None) -> tuple[str, str]:
        """Render entries as CSV. Returns (filename, content)."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for entry in entries:
            writer.writerow([
                entry.timestamp,
                entry.user_name,
                entry.action_type,
                entry.target_type or "",
                entry.target_id or "",
                entry.details,
            ])
        filename = f"audit_logs_{(today or date.today()).isoformat()}.csv"
        return filename, buffer.getvalue()
