"""Transaction schemas for the review workflow."""

from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator


class ReviewState(str, Enum):
    NEEDS_REVIEW = "needs_review"
    AUTO_CATEGORIZED = "auto_categorized"
    MANUALLY_CATEGORIZED = "manually_categorized"
    APPROVED = "approved"


class Transaction(BaseModel):
    id: str = Field(validation_alias=AliasChoices("transaction_id", "_id", "id"))
    upload_id: str | None = None
    transaction_date: str | None = None
    vendor_name: str = ""
    amount: Decimal = Decimal("0")
    payment_type: str | None = None
    transaction_type: str | None = None
    auto_category: str | None = None  # set by the backend categorizer
    manual_category: str | None = None  # set by a reviewer
    approved: bool = False
    qb_id: str | None = Field(None, validation_alias=AliasChoices("qb_id", "qbo_txn_id"))
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {"populate_by_name": True}

    @field_validator("auto_category", "manual_category", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("vendor_name", mode="before")
    @classmethod
    def _vendor_default(cls, value):
        return value or ""

    @field_validator("qb_id", mode="before")
    @classmethod
    def _qb_id_as_text(cls, value):
        return None if value in (None, "") else str(value)

    @computed_field
    @property
    def effective_category(self) -> str | None:
        return self.manual_category or self.auto_category

    @computed_field
    @property
    def review_state(self) -> ReviewState:
        if self.approved:
            return ReviewState.APPROVED
        if self.manual_category:
            return ReviewState.MANUALLY_CATEGORIZED
        if self.auto_category:
            return ReviewState.AUTO_CATEGORIZED
        return ReviewState.NEEDS_REVIEW

    @property
    def ready_for_export(self) -> bool:
        return self.approved


class TransactionUpdate(BaseModel):
    manual_category: str | None = None
    approved: bool | None = None


class ManualCategoryRequest(BaseModel):
    category: str


class ReviewSummary(BaseModel):
    total: int
    approved: int
    pending: int
    pushed: int
    needs_review: int
