"""Utilities for redacting sensitive data from strings."""

import re

# Patterns for sensitive data that should be redacted
SENSITIVE_PATTERNS = [
    # JSON token fields in provider responses
    (r'"(token|upload_token|image_token|password|encrypted_value)"\s*:\s*"[^"]*"', r'"\1": "REDACTED"'),
    # API keys, tokens, secrets
    (r'(api[_-]?key|token|auth|secret|password)=\S+', r'\1=REDACTED'),
    # Bearer tokens
    (r'Bearer\s+\S+', 'Bearer REDACTED'),
    # GitHub tokens
    (r'gh[pousr]_[A-Za-z0-9]{20,}', 'gh_REDACTED'),
    # npm tokens
    (r'npm_[A-Za-z0-9]{20,}', 'npm_REDACTED'),
]


def redact_sensitive(text: str) -> str:
    """
    Redact sensitive data from text using pattern matching.

    Args:
        text: Text potentially containing sensitive data

    Returns:
        Text with sensitive data replaced with REDACTED markers

    Example:
        >>> redact_sensitive('{"upload_token": "abc123"}')
        '{"upload_token": "REDACTED"}'
    """
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result
