"""Export schemas: QuickBooks Online push and QuickBooks Desktop IIF."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator


class PushStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"


class PushResultItem(BaseModel):
    """One entry of the backend's push response."""

    transaction_id: str = Field(validation_alias=AliasChoices("_id", "transaction_id", "id"))
    ok: bool = False
    skipped: bool = False
    error: str | None = None
    qbo_txn_id: str | None = None

    @field_validator("qbo_txn_id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return None if value in (None, "") else str(value)

    @field_validator("error", mode="before")
    @classmethod
    def _error_text(cls, value):
        if value in (None, False, ""):
            return None
        if isinstance(value, dict):
            return value.get("message") or str(value)
        if value is True:
            return "Push failed"
        return str(value)

    @property
    def status(self) -> PushStatus:
        if self.ok:
            return PushStatus.OK
        if self.skipped:
            return PushStatus.SKIPPED
        return PushStatus.ERROR


class PushOutcome(BaseModel):
    transaction_id: str
    status: PushStatus
    qbo_txn_id: str | None = None
    error: str | None = None


class PushRequest(BaseModel):
    transaction_ids: list[str] | None = None
    upload_id: str | None = None  # push everything approved in this upload


class PushResponse(BaseModel):
    outcomes: list[PushOutcome]
    ok_count: int
    skipped_count: int
    error_count: int


class IifExportRequest(BaseModel):
    register_account_name: str = ""
    transaction_ids: list[str] | None = None  # subset of the approved transactions


class ExportControls(BaseModel):
    method: str | None  # qbo_push, iif
    requires_register_account_name: bool = False


class ExportFile(BaseModel):
    filename: str
    content: bytes
    media_type: str = "application/octet-stream"
    transaction_count: int
