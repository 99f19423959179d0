"""Gmail API client functions for paging through messages and attachments."""

from __future__ import annotations

import base64
import logging
import re
from datetime import datetime, timezone
from email.utils import getaddresses
from typing import Callable, Iterator

from googleapiclient.errors import HttpError
from googleapiclient.http import BatchHttpRequest
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from mail_topic_tracker.constants import BATCH_SIZE, PAGE_SIZE
from mail_topic_tracker.models import Attachment, AttachmentRef, MailMessage

log = logging.getLogger(__name__)

_FROM_RE = re.compile(r"^(.*?)\s*<([^>]+)>$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Only what the tracker reads; keeps message bodies out of the response.
MESSAGE_FIELDS = (
    "id,internalDate,labelIds,snippet,"
    "payload(headers,filename,body/attachmentId,"
    "parts(filename,body(attachmentId,data),"
    "parts(filename,body(attachmentId,data),parts(filename,body(attachmentId,data)))))"
)


class GmailFetchError(RuntimeError):
    """Raised when a message inside a batch request could not be fetched."""


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


_transient_retry = retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)


@_transient_retry
def _execute(request):
    return request.execute()


@_transient_retry
def _execute_batch(batch: BatchHttpRequest) -> None:
    batch.execute()


def _parse_from_header(from_value: str) -> tuple[str, str]:
    """Parse a From header into (display name, email address).

    Handles formats like:
      "John Doe <john@example.com>" -> ("John Doe", "john@example.com")
      "<john@example.com>"          -> ("", "john@example.com")
      "john@example.com"            -> ("", "john@example.com")
    """
    if not from_value:
        return ("", "")
    m = _FROM_RE.match(from_value.strip())
    if m:
        name = m.group(1).strip().strip('"').strip("'")
        return (name, m.group(2).strip())
    email = from_value.strip().strip("<>")
    return ("", email)


def _parse_address_list(value: str) -> list[str]:
    return [addr for _, addr in getaddresses([value]) if addr]


def _collect_attachment_refs(part: dict, refs: list[AttachmentRef]) -> None:
    body = part.get("body", {})
    filename = part.get("filename", "")
    if filename and (body.get("attachmentId") or body.get("data")):
        refs.append(
            AttachmentRef(
                name=filename,
                attachment_id=body.get("attachmentId", ""),
                data=body.get("data", "") if not body.get("attachmentId") else "",
            )
        )
    for child in part.get("parts", []):
        _collect_attachment_refs(child, refs)


def parse_message(response: dict) -> MailMessage:
    """Turn a users.messages.get response into a MailMessage."""
    payload = response.get("payload", {})
    headers: dict[str, str] = {}
    for h in payload.get("headers", []):
        # Keep the first occurrence of repeated headers.
        headers.setdefault(h["name"].lower(), h["value"])

    name, email = _parse_from_header(headers.get("from", ""))

    refs: list[AttachmentRef] = []
    _collect_attachment_refs(payload, refs)

    received = None
    if response.get("internalDate"):
        received = datetime.fromtimestamp(int(response["internalDate"]) / 1000, tz=timezone.utc)

    return MailMessage(
        message_id=response["id"],
        subject=headers.get("subject", ""),
        sender_name=name,
        sender_email=email,
        to=_parse_address_list(headers.get("to", "")),
        cc=_parse_address_list(headers.get("cc", "")),
        received=received,
        is_read="UNREAD" not in response.get("labelIds", []),
        has_attachments=bool(refs),
        preview=response.get("snippet", ""),
        attachment_refs=refs,
    )


def build_query(since: datetime | None, query: str = "") -> str:
    """Combine a user query with a lower bound on the received time.

    Gmail's ``after:`` is exclusive and second-granular, so the bound is
    moved back one second; messages seen before are skipped by id.
    """
    parts = [query.strip()] if query and query.strip() else []
    if since is not None:
        parts.append(f"after:{int(since.timestamp()) - 1}")
    return " ".join(parts)


def list_message_ids(
    service,
    query: str | None = None,
    page_size: int = PAGE_SIZE,
) -> list[str]:
    """List all message IDs matching the query, following page tokens."""
    ids: list[str] = []
    page_token: str | None = None

    while True:
        kwargs: dict = {"userId": "me", "maxResults": page_size, "fields": "messages/id,nextPageToken"}
        if query:
            kwargs["q"] = query
        if page_token:
            kwargs["pageToken"] = page_token

        resp = _execute(service.users().messages().list(**kwargs))
        ids.extend(msg["id"] for msg in resp.get("messages", []))

        page_token = resp.get("nextPageToken")
        if not page_token:
            break

    log.debug("Listed %d message ids for query %r", len(ids), query)
    return ids


def fetch_messages(
    service,
    message_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> list[MailMessage]:
    """Fetch messages in batches using BatchHttpRequest.

    Any message that fails to load aborts the fetch with GmailFetchError.
    """
    results: list[MailMessage] = []
    total_batches = (len(message_ids) + BATCH_SIZE - 1) // BATCH_SIZE

    for batch_num in range(total_batches):
        start = batch_num * BATCH_SIZE
        end = min(start + BATCH_SIZE, len(message_ids))
        chunk = message_ids[start:end]
        errors: list[tuple[str, Exception]] = []

        batch = service.new_batch_http_request()

        def _make_callback(msg_id: str):
            def _cb(request_id, response, exception):
                if exception is not None:
                    errors.append((msg_id, exception))
                    return
                results.append(parse_message(response))

            return _cb

        for msg_id in chunk:
            batch.add(
                service.users().messages().get(
                    userId="me",
                    id=msg_id,
                    format="full",
                    fields=MESSAGE_FIELDS,
                ),
                callback=_make_callback(msg_id),
            )

        _execute_batch(batch)

        if errors:
            msg_id, exc = errors[0]
            raise GmailFetchError(f"Failed to fetch message {msg_id}: {exc}") from exc

        if callback:
            callback(batch_num + 1, total_batches)

    return results


def iter_message_pages(
    service,
    since: datetime | None = None,
    query: str = "",
    page_size: int = PAGE_SIZE,
) -> Iterator[list[MailMessage]]:
    """Yield pages of messages, oldest first.

    Gmail lists newest first, so the id list is reversed before pages are
    fetched; each page is additionally sorted by received time.
    """
    ids = list_message_ids(service, query=build_query(since, query), page_size=page_size)
    ids.reverse()

    for start in range(0, len(ids), page_size):
        page = fetch_messages(service, ids[start : start + page_size])
        page.sort(key=lambda m: m.received or _EPOCH)
        yield page


def _decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def fetch_attachments(service, message: MailMessage) -> list[Attachment]:
    """Download the file attachments of a message."""
    attachments: list[Attachment] = []
    for ref in message.attachment_refs:
        data = ref.data
        if ref.attachment_id:
            resp = _execute(
                service.users()
                .messages()
                .attachments()
                .get(userId="me", messageId=message.message_id, id=ref.attachment_id)
            )
            data = resp.get("data", "")
        attachments.append(Attachment(name=ref.name, content=_decode(data)))
    return attachments
