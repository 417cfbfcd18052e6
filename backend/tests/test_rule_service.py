"""Tests for the vendor rule service."""

import json

import pytest

from ledgerdesk.core.exceptions import ValidationError
from ledgerdesk.schemas.rule import Rule, RuleUpdate
from ledgerdesk.services.rule_service import RuleService

RULES = [
    {"rule_id": "R1", "client_id": "c1", "vendor_contains": "AMAZON", "map_to_account": "Office Supplies",
     "active": True, "match_count": 12, "created_by": {"_id": "u1", "name": "Admin User"}},
    {"_id": "R2", "client_id": "c1", "vendor_contains": "Shell", "map_to_account": "Fuel", "active": False},
]


@pytest.fixture
def rules_backend(fake_backend):
    fake_backend.add("GET", "/rules/c1", json=RULES)
    return fake_backend


@pytest.mark.asyncio
async def test_list_rules_normalizes_ids_and_counts(rules_backend, backend):
    rules = await RuleService(backend).list_rules("c1")

    assert [r.id for r in rules] == ["R1", "R2"]
    assert rules[0].created_by == "Admin User"
    assert rules[1].match_count == 0


@pytest.mark.asyncio
async def test_create_rule_returns_refetched_list(rules_backend, backend):
    rules_backend.add("POST", "/rules", status=201, json={"rule_id": "R3"})

    rules = await RuleService(backend).create_rule("c1", "  Staples ", "Office Supplies")

    sent = json.loads(rules_backend.calls("POST", "/rules")[0].content)
    assert sent == {"client_id": "c1", "vendor_contains": "Staples", "map_to_account": "Office Supplies"}
    assert len(rules_backend.calls("GET", "/rules/c1")) == 1
    assert len(rules) == 2


@pytest.mark.asyncio
async def test_create_rule_requires_both_fields(rules_backend, backend):
    with pytest.raises(ValidationError):
        await RuleService(backend).create_rule("c1", "Staples", "   ")

    assert rules_backend.calls("POST", "/rules") == []


@pytest.mark.asyncio
async def test_toggle_sends_only_active_flag(rules_backend, backend):
    rules_backend.add("PATCH", "/rules/R2", json={})

    await RuleService(backend).toggle_rule("R2", True, "c1")

    sent = json.loads(rules_backend.calls("PATCH", "/rules/R2")[0].content)
    assert sent == {"active": True}
    assert len(rules_backend.calls("GET", "/rules/c1")) == 1


@pytest.mark.asyncio
async def test_update_rejects_blank_pattern(rules_backend, backend):
    with pytest.raises(ValidationError):
        await RuleService(backend).update_rule("R1", RuleUpdate(vendor_contains=""), "c1")

    assert rules_backend.calls("PATCH", "/rules/R1") == []


@pytest.mark.asyncio
async def test_delete_refetches(rules_backend, backend):
    rules_backend.add("DELETE", "/rules/R1", status=204)

    await RuleService(backend).delete_rule("R1", "c1")

    assert len(rules_backend.calls("DELETE", "/rules/R1")) == 1
    assert len(rules_backend.calls("GET", "/rules/c1")) == 1


def test_search_matches_pattern_or_account():
    rules = [Rule.model_validate(r) for r in RULES]

    assert [r.id for r in RuleService.search(rules, "fuel")] == ["R2"]
    assert [r.id for r in RuleService.search(rules, "amaz")] == ["R1"]
    assert RuleService.search(rules, "") == rules
