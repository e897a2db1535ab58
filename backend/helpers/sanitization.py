"""
Input sanitization utilities.

Free-text profile fields are stripped of HTML and normalized to title case
before storage. Post and comment bodies are stripped of HTML but otherwise
kept as written.
"""

import re
from typing import Optional

import bleach
from email_validator import EmailNotValidError, validate_email

_WHITESPACE = re.compile(r"\s+")


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags for plain text fields.

    Args:
        content: Raw content from user input

    Returns:
        Plain text with all HTML removed, or None if input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Hello')
        'alert(1)Hello'
        >>> sanitize_plain_text('<b>Bold</b> text')
        'Bold text'
    """
    if content is None:
        return None

    return bleach.clean(content, tags=[], strip=True)


def sanitize_display_text(content: Optional[str]) -> str:
    """
    Normalize a name, company, job title or industry for display.

    Trims, collapses internal whitespace and title-cases each word (first
    letter upper, rest lower).

    Examples:
        >>> sanitize_display_text('  jOHN   smith ')
        'John Smith'
        >>> sanitize_display_text(None)
        ''
    """
    if not content:
        return ""

    text = sanitize_plain_text(content) or ""
    words = _WHITESPACE.sub(" ", text.strip()).split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words if word)


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase an email address. None becomes ""."""
    if not email:
        return ""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Check the address syntax. No DNS or deliverability checks."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
