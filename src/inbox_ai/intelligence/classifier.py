"""Rule-based email classification.

Every function here is pure and total: any combination of strings yields a
result, nothing raises. Matching is case-insensitive substring search.

Category rules are evaluated in a strict priority order and the first match
wins:

1. urgent keyword in subject or body
2. newsletter keyword in body, or a bulk-mail sender
3. promotional keyword in subject or body
4. social keyword in subject, or a social-network sender
5. updates keyword in subject
6. otherwise important

The urgency flag and the ``urgent`` category are both derived from
``URGENT_KEYWORDS``, so ``is_email_urgent`` is true exactly when
``categorize_email`` returns ``EmailCategory.URGENT``.
"""

from __future__ import annotations

from dataclasses import dataclass

from inbox_ai.models import DraftResponse, EmailCategory, EmailCreate, ReplyTone

URGENT_KEYWORDS: tuple[str, ...] = (
    "urgent",
    "asap",
    "immediately",
    "critical",
    "emergency",
    "action required",
    "high priority",
    "deadline today",
    "deadline tomorrow",
    "important:",
)

NEWSLETTER_KEYWORDS: tuple[str, ...] = (
    "unsubscribe",
    "newsletter",
    "weekly digest",
    "monthly update",
    "subscription",
    "mailing list",
)
NEWSLETTER_SENDER_MARKERS: tuple[str, ...] = ("newsletter", "noreply")

PROMOTIONAL_KEYWORDS: tuple[str, ...] = (
    "discount",
    "sale",
    "offer",
    "deal",
    "promo",
    "coupon",
    "% off",
    "limited time",
    "buy now",
    "shop now",
    "exclusive",
)

SOCIAL_KEYWORDS: tuple[str, ...] = (
    "liked your",
    "commented on",
    "mentioned you",
    "tagged you",
    "friend request",
    "followed you",
    "connection request",
)
SOCIAL_SENDER_DOMAINS: tuple[str, ...] = ("facebook", "twitter", "linkedin", "instagram")

UPDATE_KEYWORDS: tuple[str, ...] = (
    "update",
    "notification",
    "alert",
    "reminder",
    "confirmation",
    "receipt",
    "invoice",
    "order",
    "shipment",
    "delivery",
)

SUMMARY_MIN_LINE_CHARS = 20
SUMMARY_MAX_CHARS = 150

_DRAFT_TEMPLATES: dict[EmailCategory, tuple[ReplyTone, str]] = {
    EmailCategory.URGENT: (
        ReplyTone.FORMAL,
        'Thank you for your urgent message regarding "{subject}".\n\n'
        "I have received your email and will address this matter with highest priority. "
        "I will get back to you with a detailed response shortly.\n\nBest regards",
    ),
    EmailCategory.IMPORTANT: (
        ReplyTone.PROFESSIONAL,
        'Thank you for your email regarding "{subject}".\n\n'
        "I appreciate you reaching out. I have reviewed your message and will respond "
        "with the information you need.\n\nBest regards",
    ),
    EmailCategory.PROMOTIONAL: (
        ReplyTone.CASUAL,
        "Thank you for sharing this offer.\n\n"
        "I'll review the details and get back to you if interested.\n\nBest regards",
    ),
    EmailCategory.SOCIAL: (
        ReplyTone.CASUAL,
        "Thanks for connecting!\n\n"
        "I appreciate you reaching out. Let's stay in touch.\n\nBest regards",
    ),
}
_DEFAULT_DRAFT: tuple[ReplyTone, str] = (
    ReplyTone.PROFESSIONAL,
    "Thank you for your email.\n\n"
    "I have received your message and will respond accordingly.\n\nBest regards",
)


@dataclass(frozen=True)
class Classification:
    """Everything the sync layer derives from a message's text."""

    category: EmailCategory
    is_urgent: bool
    summary: str


def _contains_any(text: str, patterns: tuple[str, ...]) -> bool:
    return any(p in text for p in patterns)


def categorize_email(sender: str, subject: str, body: str) -> EmailCategory:
    """Assign one of the six categories to a message."""

    sender_l = (sender or "").lower()
    subject_l = (subject or "").lower()
    body_l = (body or "").lower()

    if _contains_any(subject_l, URGENT_KEYWORDS) or _contains_any(body_l, URGENT_KEYWORDS):
        return EmailCategory.URGENT

    if _contains_any(body_l, NEWSLETTER_KEYWORDS) or _contains_any(
        sender_l, NEWSLETTER_SENDER_MARKERS
    ):
        return EmailCategory.NEWSLETTER

    if _contains_any(subject_l, PROMOTIONAL_KEYWORDS) or _contains_any(
        body_l, PROMOTIONAL_KEYWORDS
    ):
        return EmailCategory.PROMOTIONAL

    if _contains_any(subject_l, SOCIAL_KEYWORDS) or _contains_any(sender_l, SOCIAL_SENDER_DOMAINS):
        return EmailCategory.SOCIAL

    if _contains_any(subject_l, UPDATE_KEYWORDS):
        return EmailCategory.UPDATES

    return EmailCategory.IMPORTANT


def is_email_urgent(sender: str, subject: str, body: str) -> bool:
    """Return True when subject or body carries an urgency keyword.

    ``sender`` is accepted for signature symmetry with ``categorize_email``;
    urgency never depends on who sent the message.
    """

    subject_l = (subject or "").lower()
    body_l = (body or "").lower()
    return _contains_any(subject_l, URGENT_KEYWORDS) or _contains_any(body_l, URGENT_KEYWORDS)


def summarize_email(subject: str, body: str) -> str:
    """Return the first meaningful body line, or the subject when there is none."""

    for line in (body or "").split("\n"):
        candidate = line.strip()
        if len(candidate) <= SUMMARY_MIN_LINE_CHARS:
            continue
        if len(candidate) > SUMMARY_MAX_CHARS:
            return candidate[: SUMMARY_MAX_CHARS - 3] + "..."
        return candidate

    return subject


def classify_email(sender: str, subject: str, body: str) -> Classification:
    return Classification(
        category=categorize_email(sender, subject, body),
        is_urgent=is_email_urgent(sender, subject, body),
        summary=summarize_email(subject, body),
    )


def generate_draft_response(email: EmailCreate) -> DraftResponse:
    """Build a canned reply for ``email`` based on its category."""

    subject = email.subject
    reply_subject = subject if subject.startswith("Re:") else f"Re: {subject}"
    tone, template = _DRAFT_TEMPLATES.get(email.category, _DEFAULT_DRAFT)

    return DraftResponse(
        subject=reply_subject,
        body=template.format(subject=subject),
        tone=tone,
    )
