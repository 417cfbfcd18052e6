"""Statement upload schemas."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator

from ledgerdesk.schemas.client import ClientRef, client_display_name


class UploadStatus(str, Enum):
    PENDING_PARSE = "pending_parse"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Upload(BaseModel):
    id: str = Field(validation_alias=AliasChoices("upload_id", "_id", "id"))
    client: str | ClientRef | None = Field(None, validation_alias=AliasChoices("client", "client_id"))
    original_filename: str = Field("", validation_alias=AliasChoices("original_filename", "filename"))
    uploaded_by: str | None = None
    upload_timestamp: str | None = None
    status: UploadStatus = UploadStatus.PENDING_PARSE

    model_config = {"populate_by_name": True}

    @field_validator("uploaded_by", mode="before")
    @classmethod
    def _uploader_name(cls, value):
        if isinstance(value, dict):
            return value.get("name") or value.get("_id")
        return value

    @computed_field
    @property
    def client_name(self) -> str:
        return client_display_name(self.client)
