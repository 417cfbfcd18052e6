"""Vendor rule schemas."""

from pydantic import AliasChoices, BaseModel, Field, field_validator


class RuleCreate(BaseModel):
    client_id: str
    vendor_contains: str
    map_to_account: str


class RuleUpdate(BaseModel):
    vendor_contains: str | None = None
    map_to_account: str | None = None
    active: bool | None = None


class RuleToggle(BaseModel):
    active: bool


class Rule(BaseModel):
    id: str = Field(validation_alias=AliasChoices("rule_id", "_id", "id"))
    client_id: str | None = None
    vendor_contains: str
    map_to_account: str
    active: bool = True
    match_count: int = 0  # maintained by the backend
    created_by: str | None = None
    created_at: str | None = None

    model_config = {"populate_by_name": True}

    @field_validator("match_count", mode="before")
    @classmethod
    def _missing_count_is_zero(cls, value):
        return value or 0

    @field_validator("created_by", mode="before")
    @classmethod
    def _creator_name(cls, value):
        if isinstance(value, dict):
            return value.get("name") or value.get("_id")
        return value


class RuleOffer(BaseModel):
    """Offer to turn a manual categorization into a vendor rule."""

    id: str
    transaction_id: str
    client_id: str
    vendor_contains: str
    map_to_account: str
