"""Helpers for parsing Gmail API messages into internal models."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from inbox_ai.intelligence.classifier import classify_email
from inbox_ai.models import MAX_BODY_CHARS, EmailCreate

NO_SUBJECT = "(No Subject)"


def _header_map(message: dict[str, Any]) -> dict[str, str]:
    payload = message.get("payload") or {}
    headers = payload.get("headers") or []
    result: dict[str, str] = {}
    for h in headers:
        name = h.get("name")
        value = h.get("value")
        if isinstance(name, str) and isinstance(value, str):
            # Gmail can include duplicates; keep the first.
            result.setdefault(name.lower(), value)
    return result


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, OverflowError):
        return None


def decode_body_data(data: str | None) -> str:
    """Decode a base64url ``body.data`` field, tolerating missing padding."""

    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    try:
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return ""


def extract_body(payload: dict[str, Any]) -> str:
    """Return the inline body, else the first text/plain part."""

    inline = (payload.get("body") or {}).get("data")
    if inline:
        return decode_body_data(inline)

    for part in payload.get("parts") or []:
        if part.get("mimeType") == "text/plain":
            data = (part.get("body") or {}).get("data")
            if data:
                return decode_body_data(data)
    return ""


def count_attachments(payload: dict[str, Any]) -> int:
    return sum(1 for part in payload.get("parts") or [] if part.get("filename"))


def message_to_email(
    message: dict[str, Any],
    *,
    max_body_chars: int = MAX_BODY_CHARS,
    now: datetime | None = None,
) -> EmailCreate:
    """Convert a Gmail API message (format=full) into an enriched EmailCreate.

    Category, urgency and snippet are assigned here, once, at ingestion time.

    Args:
        message: Gmail API message dict.
        max_body_chars: Body truncation length.
        now: Date used when the message carries no parseable Date header.

    Returns:
        EmailCreate: Model ready for ``Repository.create_email``.
    """

    hm = _header_map(message)
    payload = message.get("payload") or {}

    sender = hm.get("from", "")
    subject = hm.get("subject") or NO_SUBJECT
    body = extract_body(payload)[:max_body_chars]

    label_ids = message.get("labelIds") or []
    if not isinstance(label_ids, list):
        label_ids = []
    labels = [str(x) for x in label_ids if isinstance(x, str)]

    classification = classify_email(sender, subject, body)
    message_id = str(message.get("id") or "")

    return EmailCreate(
        message_id=message_id,
        thread_id=str(message.get("threadId") or "") or message_id,
        subject=subject,
        sender=sender,
        recipient=hm.get("to", ""),
        snippet=classification.summary,
        body=body,
        date=_parse_date(hm.get("date")) or now or datetime.now(timezone.utc),
        is_read="UNREAD" not in labels,
        is_starred="STARRED" in labels,
        category=classification.category,
        is_urgent=classification.is_urgent,
        labels=labels,
        attachment_count=count_attachments(payload),
    )
