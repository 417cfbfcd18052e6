"""Tests for the export dispatcher."""

import asyncio
import json

import httpx
import pytest

from ledgerdesk.core.exceptions import ConflictError, ReconnectRequiredError, ValidationError
from ledgerdesk.schemas.export import PushStatus
from ledgerdesk.schemas.transaction import Transaction
from ledgerdesk.services.export_service import ExportService


def _load(session, client, transactions):
    session.select(client)
    session.transactions = {t["transaction_id"]: Transaction.model_validate(t) for t in transactions}


def test_each_client_type_gets_one_export_control(online_client, desktop_client):
    online = ExportService.controls_for(online_client)
    desktop = ExportService.controls_for(desktop_client)

    assert online.method == "qbo_push"
    assert online.requires_register_account_name is False
    assert desktop.method == "iif"
    assert desktop.requires_register_account_name is True


@pytest.mark.asyncio
async def test_push_results_are_matched_by_id(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [
        make_txn("T1", approved=True),
        make_txn("T2", approved=True),
        make_txn("T3", approved=False),
    ])
    fake_backend.add(
        "POST",
        f"/api/qbo/{online_client.id}/push",
        json={"results": [
            {"_id": "T2", "error": "Account 'Fuel' not found"},
            {"_id": "T1", "ok": True, "qbo_txn_id": 99},
        ]},
    )

    outcomes = await ExportService(backend).push_to_quickbooks(session)

    sent = json.loads(fake_backend.calls("POST", f"/api/qbo/{online_client.id}/push")[0].content)
    assert sent == {"transactionIds": ["T1", "T2"]}
    assert len(outcomes) == 2
    assert session.push_outcomes["T1"].status == PushStatus.OK
    assert session.push_outcomes["T1"].qbo_txn_id == "99"
    assert session.push_outcomes["T2"].status == PushStatus.ERROR
    assert session.push_outcomes["T2"].error == "Account 'Fuel' not found"
    assert session.transactions["T1"].qb_id == "99"
    assert session.transactions["T2"].qb_id is None


@pytest.mark.asyncio
async def test_push_skipped_result(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [make_txn("T1", approved=True)])
    fake_backend.add(
        "POST",
        f"/api/qbo/{online_client.id}/push",
        json={"results": [{"_id": "T1", "skipped": True, "qbo_txn_id": "41"}]},
    )

    outcomes = await ExportService(backend).push_to_quickbooks(session, transaction_ids=["T1"])

    assert outcomes[0].status == PushStatus.SKIPPED
    assert outcomes[0].error is None


@pytest.mark.asyncio
async def test_push_all_approved_for_upload(fake_backend, backend, session, online_client):
    session.select(online_client)
    fake_backend.add("POST", f"/api/qbo/{online_client.id}/push", json={"results": []})

    await ExportService(backend).push_to_quickbooks(session, upload_id="u1")

    sent = json.loads(fake_backend.calls("POST", f"/api/qbo/{online_client.id}/push")[0].content)
    assert sent == {"uploadId": "u1", "pushAllApproved": True}


@pytest.mark.asyncio
async def test_push_with_nothing_approved_is_blocked(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [make_txn("T1")])

    with pytest.raises(ValidationError):
        await ExportService(backend).push_to_quickbooks(session, transaction_ids=["T1"])

    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_expired_token_requires_reconnect(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [make_txn("T1", approved=True)])
    fake_backend.add("POST", f"/api/qbo/{online_client.id}/push", status=401, json={"message": "Token expired"})

    with pytest.raises(ReconnectRequiredError):
        await ExportService(backend).push_to_quickbooks(session)

    assert session.push_outcomes == {}
    assert session.exporting is False


@pytest.mark.asyncio
async def test_desktop_client_never_pushes(fake_backend, backend, session, desktop_client, make_txn):
    _load(session, desktop_client, [make_txn("T1", approved=True)])

    with pytest.raises(ValidationError):
        await ExportService(backend).push_to_quickbooks(session)

    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_blank_register_account_name_is_blocked(fake_backend, backend, session, desktop_client, make_txn):
    _load(session, desktop_client, [make_txn("T1", approved=True)])

    with pytest.raises(ValidationError) as exc_info:
        await ExportService(backend).export_iif(session, "")

    assert "register account name" in exc_info.value.detail
    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_online_client_cannot_export_iif(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [make_txn("T1", approved=True)])

    with pytest.raises(ValidationError):
        await ExportService(backend).export_iif(session, "Checking")

    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_iif_export_downloads_approved_transactions(
    fake_backend, backend, session, desktop_client, make_txn
):
    _load(session, desktop_client, [
        make_txn("T1", approved=True),
        make_txn("T2"),
        make_txn("T3", approved=True),
    ])
    iif = b"!TRNS\tTRNSID\tTRNSTYPE\tDATE\tACCNT\tAMOUNT\n"
    fake_backend.add(
        "POST",
        f"/export/qbd/{desktop_client.id}/iif",
        content=iif,
        headers={"content-type": "application/octet-stream"},
    )

    export = await ExportService(backend).export_iif(session, "  Checking  ")

    sent = json.loads(fake_backend.calls("POST", f"/export/qbd/{desktop_client.id}/iif")[0].content)
    assert sent == {"transaction_ids": ["T1", "T3"], "register_account_name": "Checking"}
    assert export.filename == "Acme_transactions.iif"
    assert export.content == iif
    assert export.transaction_count == 2


@pytest.mark.asyncio
async def test_second_export_while_busy_conflicts(backend, session, desktop_client, make_txn):
    _load(session, desktop_client, [make_txn("T1", approved=True)])

    with session.export_lock():
        with pytest.raises(ConflictError):
            await ExportService(backend).export_iif(session, "Checking")


@pytest.mark.asyncio
async def test_late_push_outcomes_are_not_applied(
    fake_backend, backend, session, online_client, desktop_client, make_txn
):
    _load(session, online_client, [make_txn("T1", approved=True)])
    started, release = asyncio.Event(), asyncio.Event()

    async def slow_push(request):
        started.set()
        await release.wait()
        return httpx.Response(200, json={"results": [{"_id": "T1", "ok": True, "qbo_txn_id": "501"}]})

    fake_backend.add("POST", f"/api/qbo/{online_client.id}/push", slow_push)

    pending = asyncio.create_task(ExportService(backend).push_to_quickbooks(session))
    await started.wait()
    session.select(desktop_client)
    release.set()
    outcomes = await pending

    assert [o.status for o in outcomes] == [PushStatus.OK]
    assert session.push_outcomes == {}
    assert session.transactions == {}


@pytest.mark.asyncio
async def test_malformed_push_result_is_skipped(fake_backend, backend, session, online_client, make_txn):
    _load(session, online_client, [make_txn("T1", approved=True), make_txn("T2", approved=True)])
    fake_backend.add(
        "POST",
        f"/api/qbo/{online_client.id}/push",
        json={"results": [
            {"ok": True, "qbo_txn_id": "7"},
            "garbage",
            {"_id": "T2", "ok": True, "qbo_txn_id": "8"},
        ]},
    )

    outcomes = await ExportService(backend).push_to_quickbooks(session)

    assert [o.transaction_id for o in outcomes] == ["T2"]
    assert session.transactions["T2"].qb_id == "8"
    assert session.transactions["T1"].qb_id is None


@pytest.mark.asyncio
async def test_iif_export_can_be_narrowed_to_a_subset(fake_backend, backend, session, desktop_client, make_txn):
    _load(session, desktop_client, [
        make_txn("T1", approved=True),
        make_txn("T2", approved=True),
        make_txn("T3", approved=False),
    ])
    fake_backend.add("POST", f"/export/qbd/{desktop_client.id}/iif", content=b"!TRNS\n")

    export = await ExportService(backend).export_iif(session, "Checking", transaction_ids=["T2", "T3"])

    assert export.transaction_count == 1
    sent = json.loads(fake_backend.calls("POST", f"/export/qbd/{desktop_client.id}/iif")[0].content)
    assert sent["transaction_ids"] == ["T2"]


@pytest.mark.asyncio
async def test_iif_subset_without_approved_transactions_is_blocked(
    fake_backend, backend, session, desktop_client, make_txn
):
    _load(session, desktop_client, [make_txn("T1", approved=True), make_txn("T3", approved=False)])

    with pytest.raises(ValidationError):
        await ExportService(backend).export_iif(session, "Checking", transaction_ids=["T3"])

    assert fake_backend.requests == []
