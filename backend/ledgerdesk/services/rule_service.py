"""Vendor rule service.

Manages CRUD operations on vendor-to-account rules. Matching happens on the
backend, which also maintains ``match_count``, so every mutation returns the
re-fetched list instead of a locally patched one.
"""

import structlog

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.exceptions import ValidationError
from ledgerdesk.schemas.rule import Rule, RuleCreate, RuleUpdate

logger = structlog.get_logger()


class RuleService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    # ── CRUD ───────────────────────────────────────────

    async def list_rules(self, client_id: str) -> list[Rule]:
        """List all rules for a client."""
        data = await self.backend.get_json(f"/rules/{client_id}", fallback="Failed to load rules")
        return [Rule.model_validate(item) for item in data or []]

    async def create_rule(self, client_id: str, vendor_contains: str, map_to_account: str) -> list[Rule]:
        """Create a rule and return the client's refreshed rule list."""
        vendor_contains = (vendor_contains or "").strip()
        map_to_account = (map_to_account or "").strip()
        if not vendor_contains or not map_to_account:
            raise ValidationError("Please fill in all fields.")

        payload = RuleCreate(
            client_id=client_id,
            vendor_contains=vendor_contains,
            map_to_account=map_to_account,
        )
        await self.backend.post_json("/rules", payload.model_dump(), fallback="Failed to create rule")
        logger.info(
            "rule_created",
            client_id=client_id,
            vendor_contains=vendor_contains,
            map_to_account=map_to_account,
        )
        return await self.list_rules(client_id)

    async def update_rule(self, rule_id: str, data: RuleUpdate, client_id: str) -> list[Rule]:
        """Update an existing rule; only the fields that were set are sent."""
        update_data = data.model_dump(exclude_unset=True)
        for key in ("vendor_contains", "map_to_account"):
            if key in update_data:
                value = (update_data[key] or "").strip()
                if not value:
                    raise ValidationError("Please fill in all fields.")
                update_data[key] = value
        if not update_data:
            raise ValidationError("Nothing to update")

        await self.backend.patch_json(f"/rules/{rule_id}", update_data, fallback="Failed to update rule")
        logger.info("rule_updated", rule_id=rule_id, fields=sorted(update_data))
        return await self.list_rules(client_id)

    async def toggle_rule(self, rule_id: str, active: bool, client_id: str) -> list[Rule]:
        """Enable or disable a rule without touching its pattern or account."""
        return await self.update_rule(rule_id, RuleUpdate(active=active), client_id)

    async def delete_rule(self, rule_id: str, client_id: str) -> list[Rule]:
        await self.backend.delete(f"/rules/{rule_id}", fallback="Failed to delete rule")
        logger.info("rule_deleted", rule_id=rule_id, client_id=client_id)
        return await self.list_rules(client_id)

    # ── Helpers ─────────────────────────────────────────

    @staticmethod
    def search(rules: list[Rule], term: str | None) -> list[Rule]:
        """Case-insensitive substring filter over pattern and mapped account."""
        if not term:
            return rules
        needle = term.lower()
        return [
            rule
            for rule in rules
            if needle in rule.vendor_contains.lower() or needle in rule.map_to_account.lower()
        ]
