"""Audit log schemas."""

from pydantic import AliasChoices, BaseModel, Field, computed_field


class LogUser(BaseModel):
    id: str | None = Field(None, validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    email: str | None = None
    role: str | None = None


class LogEntry(BaseModel):
    id: str = Field(validation_alias=AliasChoices("log_id", "_id", "id"))
    user: LogUser | str | None = Field(None, validation_alias=AliasChoices("user_id", "user"))
    action_type: str
    target_type: str | None = None
    target_id: str | None = None
    timestamp: str
    details: str = ""

    @computed_field
    @property
    def user_name(self) -> str:
        if isinstance(self.user, LogUser):
            return self.user.name or self.user.id or "-"
        return self.user or "-"


class RollbackResult(BaseModel):
    message: str
