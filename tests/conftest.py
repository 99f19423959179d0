"""Shared fixtures for tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mail_topic_tracker.models import Attachment, AttachmentRef, MailMessage, MessageRow


def make_message(message_id: str, **kwargs) -> MailMessage:
    defaults = dict(
        subject="Hello",
        sender_name="Alice Smith",
        sender_email="alice@acme.com",
        to=["bob@bigco.io"],
        cc=[],
        received=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        is_read=False,
        has_attachments=False,
        preview="",
    )
    defaults.update(kwargs)
    return MailMessage(message_id=message_id, **defaults)


def make_row(message_id: str, **kwargs) -> MessageRow:
    defaults = dict(
        date_local="2024-05-01 09:30",
        from_name="Alice Smith",
        from_address="alice@acme.com",
        company="Acme",
        window="Bigco",
        subject="Hello",
        is_read="No",
        has_attachments="No",
        attachment_count=0,
        attachment_paths=(),
    )
    defaults.update(kwargs)
    return MessageRow(message_id=message_id, **defaults)


@pytest.fixture
def project_message() -> MailMessage:
    return make_message(
        "msg_prj_001",
        subject="Re: [PRJ-42] kickoff",
        preview="Agenda attached for the kickoff meeting",
        sender_name="Carol Jones",
        sender_email="carol@bigco.io",
        to=["dave@acme.com", "erin@acme.com"],
        cc=["frank@partner-firm.com"],
        received=datetime(2024, 5, 2, 14, 5, tzinfo=timezone.utc),
        is_read=True,
        has_attachments=True,
        attachment_refs=[AttachmentRef(name="agenda.pdf", attachment_id="att-1")],
    )


@pytest.fixture
def invoice_message() -> MailMessage:
    return make_message(
        "msg_inv_001",
        subject="Invoice INV-9981",
        sender_name="Billing",
        sender_email="billing@acme.com",
        to=["ap@bigco.io"],
        received=datetime(2024, 5, 3, 8, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def plain_message() -> MailMessage:
    return make_message(
        "msg_plain_001",
        subject="no markers here",
        preview="nothing either",
        sender_name="Carol Jones",
        sender_email="carol@bigco.io",
        to=["dave@acme.com"],
        received=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def fake_download():
    """Downloader returning one small attachment and recording its calls."""
    calls: list[str] = []

    def _download(message: MailMessage) -> list[Attachment]:
        calls.append(message.message_id)
        return [Attachment(name=ref.name, content=b"%PDF-1.4") for ref in message.attachment_refs]

    _download.calls = calls
    return _download
