"""
Email archive rendering: HTML email bodies to cleaned text, and a list of
emails to a single PDF (PyMuPDF).
"""

import html
import re
import textwrap
from datetime import datetime
from pathlib import Path

import fitz  # PyMuPDF

from monday_sync.config import settings
from monday_sync.core.logging import get_logger
from monday_sync.core.models import CrmEmail

log = get_logger(__name__)

PAGE_MARGIN = 50
FONT_SIZE = 11
LINE_HEIGHT = 14
WRAP_WIDTH = 90

_BLOCK_TAGS = re.compile(r"</(p|div|tr|li|h[1-6]|table|blockquote)\s*>", re.IGNORECASE)
_BR_TAGS = re.compile(r"<br\s*/?>", re.IGNORECASE)
_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*>[\s\S]*?</\1\s*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")


def html_to_text(content: str) -> str:
    """Convert an HTML body to plain text, keeping line breaks."""
    if not content:
        return ""
    text = _SCRIPT_STYLE.sub("", content)
    text = _BR_TAGS.sub("\n", text)
    text = _BLOCK_TAGS.sub("\n", text)
    text = _ANY_TAG.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.splitlines()]
    return "\n".join(lines)


def clean_email_content(content: str, strip_patterns: list[str] | None = None) -> str:
    """
    Turn an email body into the text archived in the PDF.

    Removes legal notices and inline image markers, then collapses runs of
    blank lines.
    """
    patterns = strip_patterns if strip_patterns is not None else settings.email_strip_patterns
    text = html_to_text(content)
    for pattern in patterns:
        text = re.sub(pattern, "", text)
    text = re.sub(r"(\n\s*){3,}", "\n\n", text)
    return text.strip()


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_sent_time(value: str | None) -> str:
    """Format an ISO timestamp like 'March 5th 2024, 3:04:05 pm'."""
    if not value:
        return "No date available"
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    hour = dt.hour % 12 or 12
    suffix = "am" if dt.hour < 12 else "pm"
    return f"{dt:%B} {_ordinal(dt.day)} {dt.year}, {hour}:{dt:%M:%S} {suffix}"


def format_email_block(index: int, email: CrmEmail) -> str:
    """Text block for one email of the archive."""
    return (
        f"MAIL {index}:\n"
        f"Sent: {format_sent_time(email.sent_time)}\n"
        f"Subject: {email.subject}\n"
        f"From: {email.sender}\n"
        f"To: {email.to}\n"
        f"\n"
        f"Content:\n"
        f"{email.content}\n"
    )


def _wrap(text: str) -> list[str]:
    lines = []
    for raw in text.splitlines():
        lines.extend(textwrap.wrap(raw, WRAP_WIDTH) or [""])
    return lines


def render_emails_pdf(emails: list[CrmEmail], output_path: Path) -> Path:
    """
    Write all emails into one PDF, three blank lines between emails.

    Args:
        emails: Emails with already cleaned content
        output_path: Destination PDF path

    Returns:
        output_path
    """
    blocks = [format_email_block(i, email) for i, email in enumerate(emails, start=1)]
    lines = _wrap("\n\n\n".join(blocks))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc = fitz.open()
    try:
        page = None
        y = 0.0
        for line in lines:
            if page is None or y > page.rect.height - PAGE_MARGIN:
                page = doc.new_page()
                y = PAGE_MARGIN
            if line:
                page.insert_text((PAGE_MARGIN, y), line, fontsize=FONT_SIZE, fontname="helv")
            y += LINE_HEIGHT
        if page is None:
            doc.new_page()
        doc.save(str(output_path))
    finally:
        doc.close()

    log.info("pdf_created", path=str(output_path), emails=len(emails))
    return output_path
