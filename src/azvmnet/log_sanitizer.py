"""Log sanitization module for preventing secret leakage.

Azure error messages and debug dumps of request bodies can carry the client
secret or the VM admin password. Everything that leaves azvmnet through a
log line or the CLI goes through LogSanitizer first.

Redacted data:
- Client secrets (key=value and CLIENT_SECRET=value forms)
- Passwords, including admin_password fields in request bodies
- Bearer tokens and access tokens
- Literal secret values registered at runtime
"""

import re
from re import Pattern
from typing import Any, ClassVar


class LogSanitizer:
    """Sanitize sensitive data from logs and error messages.

    All methods are class methods and can be called without instantiation.
    """

    REDACTED = "[REDACTED]"
    MASKED = "****"

    # Order matters: more specific patterns should come first
    SECRET_PATTERNS: ClassVar[dict[str, Pattern]] = {
        "client_secret_assignment": re.compile(
            r'(client[_-]?secret["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)',
            re.IGNORECASE,
        ),
        "client_secret_env": re.compile(
            r"((?<![\w])CLIENT_SECRET[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)]+)"
        ),
        "password": re.compile(
            r'((?:admin[_-]?)?password["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)', re.IGNORECASE
        ),
        "authorization_bearer": re.compile(r"(Authorization:\s*Bearer\s+)([^\s]+)", re.IGNORECASE),
        "access_token": re.compile(
            r'(access[_-]?token["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)',
            re.IGNORECASE,
        ),
    }

    SENSITIVE_KEYS: ClassVar[frozenset[str]] = frozenset(
        {"client_secret", "password", "access_token", "token", "secret", "credential"}
    )

    # Literal values (VM admin password, client secret) registered by the run
    _known_secrets: ClassVar[set[str]] = set()

    @classmethod
    def register_secret(cls, value: str | None) -> None:
        """Remember a literal secret so it is masked wherever it appears.

        Args:
            value: Secret value; empty values are ignored
        """
        if value:
            cls._known_secrets.add(value)

    @classmethod
    def clear_registered_secrets(cls) -> None:
        """Forget all registered literal secrets."""
        cls._known_secrets.clear()

    @classmethod
    def sanitize(cls, message: Any) -> str:
        """Sanitize message by redacting sensitive patterns.

        Args:
            message: The message to sanitize (non-strings are converted)

        Returns:
            Sanitized message with secrets replaced by [REDACTED] or ****

        Examples:
            >>> LogSanitizer.sanitize("client_secret=abc123")
            'client_secret=[REDACTED]'
        """
        result = message if isinstance(message, str) else str(message)

        # Longest first so a secret containing another secret is fully masked
        for secret in sorted(cls._known_secrets, key=len, reverse=True):
            result = result.replace(secret, cls.MASKED)

        for pattern in cls.SECRET_PATTERNS.values():
            result = pattern.sub(r"\1" + cls.REDACTED, result)

        return result

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Sanitize dictionary values recursively.

        Args:
            data: Dictionary to sanitize (e.g. a VM request body)

        Returns:
            New dictionary with sensitive values redacted

        Examples:
            >>> LogSanitizer.sanitize_dict({"os_profile": {"admin_password": "x"}})
            {'os_profile': {'admin_password': '[REDACTED]'}}
        """
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(word in key_lower for word in cls.SENSITIVE_KEYS):
                result[key] = cls.REDACTED
            elif isinstance(value, dict):
                result[key] = cls.sanitize_dict(value)
            elif isinstance(value, str):
                result[key] = cls.sanitize(value)
            elif isinstance(value, (list, tuple)):
                result[key] = type(value)(
                    cls.sanitize_dict(item)
                    if isinstance(item, dict)
                    else cls.sanitize(item)
                    if isinstance(item, str)
                    else item
                    for item in value
                )
            else:
                result[key] = value
        return result

    @classmethod
    def create_safe_error_message(cls, error: BaseException, context: str = "") -> str:
        """Create error message with secrets sanitized.

        Args:
            error: The exception to sanitize
            context: Optional context string to prepend

        Returns:
            Sanitized error message

        Examples:
            >>> err = ValueError("Auth failed with client_secret=abc123")
            >>> LogSanitizer.create_safe_error_message(err, "Authentication")
            'Authentication: Auth failed with client_secret=[REDACTED]'
        """
        sanitized_msg = cls.sanitize(str(error))
        if context:
            return f"{context}: {sanitized_msg}"
        return sanitized_msg

    @classmethod
    def sanitize_exception(cls, exc: BaseException) -> str:
        """Sanitize exception message."""
        return cls.sanitize(str(exc))


__all__ = ["LogSanitizer"]
