"""Tests for statement uploads, the audit log and the QuickBooks connection."""

import json
from datetime import date

import pytest

from ledgerdesk.core.exceptions import ValidationError
from ledgerdesk.schemas.audit import LogEntry
from ledgerdesk.schemas.client import Client, client_display_name
from ledgerdesk.schemas.upload import Upload
from ledgerdesk.services.audit_service import AuditService
from ledgerdesk.services.quickbooks_service import QuickBooksService
from ledgerdesk.services.upload_service import UploadService


# ── Uploads ────────────────────────────────────────────


def test_validate_file_rejects_unsupported_type(backend):
    service = UploadService(backend, max_upload_size_mb=10, allowed_extensions=[".pdf", ".csv"])

    with pytest.raises(ValidationError) as exc:
        service.validate_file("statement.xlsx", 100)

    assert exc.value.detail == "File must be PDF, CSV format only."


def test_validate_file_rejects_large_file(backend):
    service = UploadService(backend, max_upload_size_mb=10, allowed_extensions=[".pdf", ".csv"])

    with pytest.raises(ValidationError) as exc:
        service.validate_file("statement.PDF", 11 * 1024 * 1024)

    assert exc.value.detail == "File must be under 10MB."


@pytest.mark.asyncio
async def test_upload_sends_multipart(fake_backend, backend):
    fake_backend.add(
        "POST",
        "/uploads",
        status=201,
        json={"upload_id": "u9", "client_id": {"_id": "c1", "name": "Acme"}, "original_filename": "acme.csv"},
    )
    service = UploadService(backend, allowed_extensions=[".csv"])

    upload = await service.upload("acme.csv", b"date,amount\n", client_id="c1", content_type="text/csv")

    assert upload.id == "u9"
    assert upload.client_name == "Acme"
    body = fake_backend.calls("POST", "/uploads")[0].content
    assert b'name="client_id"' in body
    assert b'filename="acme.csv"' in body


@pytest.mark.asyncio
async def test_invalid_upload_never_reaches_backend(fake_backend, backend):
    service = UploadService(backend, allowed_extensions=[".csv"])

    with pytest.raises(ValidationError):
        await service.upload("empty.csv", b"")

    assert fake_backend.requests == []


def test_detect_client_by_first_name_word():
    clients = [
        Client.model_validate({"_id": "c1", "name": "Globex Corporation"}),
        Client.model_validate({"_id": "c2", "name": "Acme Tools"}),
    ]

    assert UploadService.detect_client("ACME_jan_2024.pdf", clients).id == "c2"
    assert UploadService.detect_client("statement.pdf", clients) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Acme", "Acme"),
        ({"_id": "c1", "name": "Globex"}, "Globex"),
        ({"_id": "c1"}, "-"),
        (None, "-"),
        ("   ", "-"),
    ],
)
def test_client_display_name(value, expected):
    assert client_display_name(value) == expected


def test_upload_client_name_from_legacy_string():
    upload = Upload.model_validate({"_id": "u1", "client": "Acme", "status": "completed"})

    assert upload.client_name == "Acme"


# ── Audit log ──────────────────────────────────────────


def _entries():
    return [
        LogEntry.model_validate({
            "log_id": "l1",
            "user_id": {"_id": "u1", "name": "Dana"},
            "action_type": "UPLOAD",
            "target_type": "upload",
            "target_id": "u1",
            "timestamp": "2024-02-01T10:00:00Z",
            "details": "Uploaded acme.csv",
        }),
        LogEntry.model_validate({
            "log_id": "l2",
            "user": "system",
            "action_type": "RULE_CREATED",
            "target_type": "rule",
            "timestamp": "2024-02-01T11:00:00Z",
            "details": 'Vendor "Shell" mapped',
        }),
    ]


def test_filter_logs():
    entries = _entries()

    assert [e.id for e in AuditService.filter_logs(entries, search="dana")] == ["l1"]
    assert [e.id for e in AuditService.filter_logs(entries, target_type="rule")] == ["l2"]
    assert AuditService.filter_logs(entries, search="upload", action="RULE_CREATED") == []


def test_export_csv():
    filename, content = AuditService.export_csv(_entries(), today=date(2024, 2, 2))

    assert filename == "audit_logs_2024-02-02.csv"
    lines = content.splitlines()
    assert lines[0] == '"Timestamp","User","Action","Target Type","Target ID","Details"'
    assert lines[1].startswith('"2024-02-01T10:00:00Z","Dana","UPLOAD"')
    assert lines[2].endswith('"Vendor ""Shell"" mapped"')


@pytest.mark.asyncio
async def test_list_logs_passes_filters(fake_backend, backend):
    fake_backend.add("GET", "/logs", json=[])

    await AuditService(backend).list_logs(user="Dana", on_date=date(2024, 2, 1))

    request = fake_backend.calls("GET", "/logs")[0]
    assert dict(request.url.params) == {"user": "Dana", "date": "2024-02-01"}


@pytest.mark.asyncio
async def test_rollback(fake_backend, backend):
    fake_backend.add("POST", "/rollback/u1", json={"message": "Rolled back 12 transactions"})

    result = await AuditService(backend).rollback("u1")

    assert result.message == "Rolled back 12 transactions"


# ── QuickBooks connection ──────────────────────────────


def test_connect_url(backend):
    assert QuickBooksService(backend).connect_url("c1") == "http://backend.test/api/qbo/c1/connect"


@pytest.mark.asyncio
async def test_disconnect_sends_token_type(fake_backend, backend):
    fake_backend.add("POST", "/api/qbo/c1/disconnect", json={"success": True})

    status = await QuickBooksService(backend).disconnect("c1", "access")

    assert status.connected is False
    sent = json.loads(fake_backend.calls("POST", "/api/qbo/c1/disconnect")[0].content)
    assert sent == {"tokenType": "access"}
