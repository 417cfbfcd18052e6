"""Review session snapshots returned by the review API."""

from pydantic import BaseModel

from ledgerdesk.schemas.category import CategoryResolution
from ledgerdesk.schemas.client import Client, ClientWorkflow
from ledgerdesk.schemas.export import ExportControls
from ledgerdesk.schemas.rule import RuleOffer
from ledgerdesk.schemas.transaction import ReviewSummary, Transaction


class ReviewSnapshot(BaseModel):
    client: Client | None
    workflow: ClientWorkflow | None = None
    export_controls: ExportControls | None = None
    categories: CategoryResolution
    transactions: list[Transaction]
    summary: ReviewSummary


class CategoryAssignment(BaseModel):
    transaction: Transaction
    rule_offer: RuleOffer | None = None
