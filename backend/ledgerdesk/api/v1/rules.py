"""Vendor rule API routes."""

from fastapi import APIRouter, Depends

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.schemas.rule import Rule, RuleCreate, RuleToggle, RuleUpdate
from ledgerdesk.services.rule_service import RuleService

router = APIRouter()


@router.get("/{client_id}", response_model=list[Rule])
async def list_rules(
    client_id: str,
    search: str | None = None,
    backend: BackendClient = Depends(get_backend),
):
    """List a client's rules, optionally filtered by a search term."""
    rules = await RuleService(backend).list_rules(client_id)
    return RuleService.search(rules, search)


@router.post("", response_model=list[Rule], status_code=201)
async def create_rule(data: RuleCreate, backend: BackendClient = Depends(get_backend)):
    return await RuleService(backend).create_rule(data.client_id, data.vendor_contains, data.map_to_account)


@router.patch("/{client_id}/{rule_id}", response_model=list[Rule])
async def update_rule(
    client_id: str,
    rule_id: str,
    data: RuleUpdate,
    backend: BackendClient = Depends(get_backend),
):
    return await RuleService(backend).update_rule(rule_id, data, client_id)


@router.post("/{client_id}/{rule_id}/toggle", response_model=list[Rule])
async def toggle_rule(
    client_id: str,
    rule_id: str,
    data: RuleToggle,
    backend: BackendClient = Depends(get_backend),
):
    """Enable or disable a rule."""
    return await RuleService(backend).toggle_rule(rule_id, data.active, client_id)


@router.delete("/{client_id}/{rule_id}", response_model=list[Rule])
async def delete_rule(client_id: str, rule_id: str, backend: BackendClient = Depends(get_backend)):
    return await RuleService(backend).delete_rule(rule_id, client_id)
