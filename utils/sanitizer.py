"""
Input Sanitization Module

Cleans user input and externally fetched text before it is stored.
Templates autoescape on output, so stored text is plain (tags stripped,
entities decoded) rather than HTML-escaped.
"""

import html
import re
from urllib.parse import urlparse

from constants import MAX_LENGTHS

TAG_PATTERN = re.compile(r'<[^>]*>')
CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Clean a single-line value: strip tags, decode entities, drop control
    characters, collapse whitespace and truncate.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Sanitized string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = TAG_PATTERN.sub(' ', text)
    text = html.unescape(text)
    text = CONTROL_CHARS.sub('', text)
    text = re.sub(r'\s+', ' ', text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip()

    return text


def sanitize_multiline(text, max_length=10000):
    """Like sanitize_text but keeps line breaks (bio, bulk entry)."""
    if not text:
        return ''

    if not isinstance(text, str):
        text = str(text)

    lines = [sanitize_text(line) for line in text.replace('\r\n', '\n').split('\n')]
    text = '\n'.join(lines).strip()
    # At most one blank line in a row
    text = re.sub(r'\n{3,}', '\n\n', text)

    if len(text) > max_length:
        text = text[:max_length].rstrip()

    return text


def sanitize_url(url):
    """
    Sanitize a URL by rejecting dangerous schemes.

    Prevents javascript:, data:, vbscript:, and other dangerous URL schemes
    that could execute code when used in href or src attributes.

    Args:
        url: The URL to validate (can be None)

    Returns:
        The URL if safe, empty string if unsafe or invalid
    """
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()

    dangerous_schemes = {
        'javascript', 'data', 'vbscript', 'file',
        'blob', 'about', 'chrome', 'moz-extension'
    }

    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    # Only allow http and https (or a site-relative path)
    scheme = parsed.scheme.lower()
    if scheme not in ('http', 'https', ''):
        return ''

    # Percent-encoded variants such as "j%61v%61script:"
    url_lower = url.lower()
    for dangerous in dangerous_schemes:
        if dangerous + ':' in url_lower:
            return ''
        encoded = dangerous.replace('a', '%61')
        if encoded != dangerous and encoded + ':' in url_lower:
            return ''

    if len(url) > MAX_LENGTHS['source_url']:
        return ''

    return url


def sanitize_recipe_name(name, max_length=MAX_LENGTHS['recipe_name']):
    """Sanitize a recipe name; falls back to 'Imported Recipe' when empty."""
    name = sanitize_text(name, max_length=max_length)
    return name or 'Imported Recipe'


def sanitize_instruction(text, max_length=MAX_LENGTHS['instruction']):
    return sanitize_text(text, max_length=max_length)


def sanitize_ingredient_text(text, max_length=MAX_LENGTHS['ingredient_text']):
    """Sanitize an ingredient line (or one of its fields) from external sources."""
    return sanitize_text(text, max_length=max_length)
