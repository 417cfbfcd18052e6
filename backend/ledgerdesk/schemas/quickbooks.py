"""QuickBooks Online connection schemas."""

from pydantic import AliasChoices, BaseModel, Field


class QBOKeys(BaseModel):
    qb_client_id: str
    qb_client_secret: str


class QBOStatus(BaseModel):
    connected: bool = False
    realm_id: str | None = Field(None, validation_alias=AliasChoices("realmId", "realm_id"))
    token_expires_at: str | None = None
    has_access_token: bool = False
    has_refresh_token: bool = False


class RegisterAccount(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "Id", "_id"))
    name: str = Field(validation_alias=AliasChoices("name", "Name"))
    type: str | None = Field(None, validation_alias=AliasChoices("type", "AccountType"))


class RegisterSelection(BaseModel):
    qbo_register_account_id: str
    qbo_register_account_type: str


class ConnectLink(BaseModel):
    url: str
