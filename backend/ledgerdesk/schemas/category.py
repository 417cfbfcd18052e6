"""Category option schemas."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator


class CategorySource(str, Enum):
    QBO_ACCOUNTS = "qbo_accounts"
    COA_FILE = "coa_file"


class CategoryOption(BaseModel):
    """A label a reviewer can assign to a transaction."""

    id: str
    name: str
    number: str | None = None
    type: str | None = None
    detail_type: str | None = None
    balance: str | None = None
    display_text: str
    source: CategorySource

    @property
    def label(self) -> str:
        return self.display_text


class CategoryResolution(BaseModel):
    client_id: str | None
    source: CategorySource | None = None
    categories: list[CategoryOption] = []
    error: str | None = None  # retryable; the caller may refresh
    needs_coa_upload: bool = False
    stale: bool = False  # the selection changed while the request was in flight


class CategoryCreate(BaseModel):
    name: str


class CategoryUpdate(BaseModel):
    name: str


class Category(BaseModel):
    """Entry of the firm-wide category list, independent of any client."""

    id: str = Field(validation_alias=AliasChoices("_id", "id", "category_id"))
    name: str
    created_by: str | None = None

    model_config = {"populate_by_name": True}

    @field_validator("created_by", mode="before")
    @classmethod
    def _creator_name(cls, value):
        if isinstance(value, dict):
            return value.get("name") or value.get("_id")
        return value
