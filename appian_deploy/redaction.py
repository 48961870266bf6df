"""
Redaction of credentials in text destined for logs.

Applied to configuration dumps and API error bodies before they are logged.
"""

from __future__ import annotations

import re

_API_KEY_PATTERN = re.compile(r'''(?i)(api[_-]?key|apikey|token)["']?\s*[:=]\s*["']?[a-zA-Z0-9_-]{20,}["']?''')
_URL_CREDENTIALS_PATTERN = re.compile(r'(?i)(https?://)[a-zA-Z0-9_-]+:[^@\s]+@')

REDACTED = '***REDACTED***'


def redact_sensitive_info(text: str) -> str:
    """
    Mask API keys, tokens and URL-embedded credentials.

    Keys shorter than 20 characters are left alone; they are not plausible
    secrets and masking them makes diagnostics harder.

    Args:
        text: Arbitrary text (JSON, repr output, response bodies)

    Returns:
        Text with `api_key=***REDACTED***` and `https://***:***@` substitutions
    """
    text = _API_KEY_PATTERN.sub(rf'\1={REDACTED}', text)
    return _URL_CREDENTIALS_PATTERN.sub(r'\1***:***@', text)
