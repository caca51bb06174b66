"""Error sanitization utilities to keep credentials out of logs and events."""

import re


# Patterns whose captured value is redacted
SENSITIVE_PATTERNS = [
    r"(bearer)\s+[A-Za-z0-9\-_\.=]+",
    r"(client[_\-\s]?certificate[_\-\s]?data[:=\s]+)[A-Za-z0-9/+=]+",
    r"(client[_\-\s]?key[_\-\s]?data[:=\s]+)[A-Za-z0-9/+=]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "token",
    "password",
    "secret",
    "credentials",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize an error message by redacting tokens and credentials.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"\b{field}[:=\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize an exception message.

    ApiException bodies can echo request headers, so they are reduced to
    status and reason.
    """
    status = getattr(error, "status", None)
    reason = getattr(error, "reason", None)
    if status is not None and reason is not None:
        return sanitize_error_message(f"({status}) {reason}")
    return sanitize_error_message(str(error))
