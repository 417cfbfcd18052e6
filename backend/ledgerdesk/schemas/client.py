"""Client schemas and the client reference normalization."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class AccountType(str, Enum):
    ONLINE = "online"
    DESKTOP = "desktop"


class ClientRef(BaseModel):
    """Embedded client reference, as returned by the unified endpoints."""

    id: str | None = Field(None, validation_alias=AliasChoices("_id", "id", "client_id"))
    name: str | None = Field(None, validation_alias=AliasChoices("name", "client_name"))


def client_display_name(value: "str | ClientRef | dict | None", fallback: str = "-") -> str:
    """Resolve a client field that may be a bare name, a reference or missing.

    Legacy endpoints return the client name as a string, unified ones embed
    ``{_id, name}``. This is the one place that decides what to show.
    """
    if value is None:
        return fallback
    if isinstance(value, dict):
        value = ClientRef.model_validate(value)
    if isinstance(value, ClientRef):
        return value.name or fallback
    text = str(value).strip()
    return text or fallback


class Client(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id", "client_id"))
    name: str
    client_number: int | None = None
    # Older records carry the type under qb_type
    account_type: AccountType | None = Field(
        None, validation_alias=AliasChoices("account_type", "qb_type")
    )
    email: str | None = None
    phone: str | None = None
    qb_client_id: str | None = None
    qb_client_secret: str | None = Field(None, exclude=True)
    realm_id: str | None = Field(None, validation_alias=AliasChoices("realm_id", "realmId", "qbo_realm_id"))
    coa_version: str | None = Field(
        None, validation_alias=AliasChoices("coa_version", "active_coa_version", "coa_upload_id")
    )

    model_config = {"populate_by_name": True}

    @field_validator("account_type", mode="before")
    @classmethod
    def _unknown_type_is_unset(cls, value):
        if isinstance(value, AccountType):
            return value
        if isinstance(value, str) and value.strip().lower() in {t.value for t in AccountType}:
            return value.strip().lower()
        return None

    @field_validator("client_number", mode="before")
    @classmethod
    def _blank_number_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ClientCreate(BaseModel):
    name: str
    client_number: int | None = None
    account_type: AccountType
    email: str | None = None
    phone: str | None = None
    qb_client_id: str | None = None
    qb_client_secret: str | None = None
    coa_csv: str | None = None  # filename of the Chart of Accounts imported with a desktop client

    @model_validator(mode="after")
    def _desktop_needs_coa(self):
        if self.account_type == AccountType.DESKTOP and not self.coa_csv:
            raise ValueError("A Chart of Accounts file is required for desktop clients")
        return self


class ClientUpdate(BaseModel):
    """Editable client fields. The account type is fixed at creation."""

    name: str | None = None
    client_number: int | None = None
    email: str | None = None
    phone: str | None = None
    qb_client_id: str | None = None
    qb_client_secret: str | None = None
    coa_csv: str | None = None

    model_config = {"extra": "forbid"}


class ClientWorkflow(BaseModel):
    """How a client's transactions are categorized and exported."""

    account_type: AccountType | None
    category_source: str | None  # qbo_accounts, coa_file
    export_method: str | None  # qbo_push, iif
    needs_coa: bool
