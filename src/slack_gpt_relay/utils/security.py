"""Keeping the relay's credentials out of log output.

Three secrets pass through this service: the Slack bot token, the Slack
signing secret (and the request signatures derived from it), and the model
provider API key. They are removed two ways:

- by key: a value stored under a sensitive name (``signing_secret``,
  ``x-slack-signature``, ``api_key``, ...) is replaced wholesale, whatever
  it looks like
- by shape: any other string is scanned for token formats and the matches
  are replaced

A pattern that fails to compile raises RedactionError at construction, so
a broken redactor can never be installed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "[REDACTED]"

# Compared after lower-casing and mapping "-" to "_"
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "api_key",
        "authorization",
        "bot_token",
        "password",
        "signing_secret",
        "slack_bot_token",
        "slack_signing_secret",
        "openai_api_key",
        "anthropic_api_key",
        "x_slack_signature",
    }
)

SECRET_SHAPES: Mapping[str, str] = {
    "slack_token": r"xox[abeoprs]-[\w-]+",
    "slack_app_token": r"xapp-[\w-]+",
    "slack_signature": r"v0=[a-f0-9]{64}",
    "anthropic_key": r"sk-ant-[\w-]{20,}",
    "openai_project_key": r"sk-proj-[\w-]{20,}",
    "openai_key": r"sk-[a-zA-Z0-9]{48}",
    "bearer": r"(?i:bearer\s+[\w.~+/-]{16,}=*)",
    "assignment": r"(?i:(?:api[_-]?key|secret|token|password)\s*[=:]\s*[\"']?[\w-]{16,})",
    "jwt": r"eyJ[\w-]*\.eyJ[\w-]*\.[\w-]*",
    "private_key": r"-----BEGIN (?:RSA |EC |OPENSSH )?PRIVATE KEY-----",
}


class RedactionError(Exception):
    """A redaction pattern could not be compiled."""


def _normalize_key(key: str) -> str:
    return key.lower().replace("-", "_")


class SecretRedactor:
    """Scrubs secrets from strings and nested log values.

    Example:
        redactor = SecretRedactor()
        redactor.redact("token xoxb-1-2-abc")            # "token [REDACTED]"
        redactor.scrub({"signing_secret": "8f74..."})     # {"signing_secret": "[REDACTED]"}
    """

    def __init__(
        self,
        extra_shapes: Mapping[str, str] | None = None,
        extra_keys: Iterable[str] = (),
        placeholder: str = REDACTED,
    ) -> None:
        self.placeholder = placeholder
        self._keys = SENSITIVE_KEYS | {_normalize_key(k) for k in extra_keys}

        shapes = {**SECRET_SHAPES, **(extra_shapes or {})}
        try:
            self._pattern = re.compile("|".join(f"(?:{p})" for p in shapes.values()))
        except re.error as e:
            raise RedactionError(f"Invalid secret pattern: {e}") from e

    def is_sensitive_key(self, key: str) -> bool:
        """Whether values stored under ``key`` are secrets by definition."""
        return _normalize_key(key) in self._keys

    def redact(self, text: str) -> str:
        """Replace every secret-shaped substring of ``text``."""
        if not text:
            return text
        return self._pattern.sub(self.placeholder, text)

    def has_secrets(self, text: str) -> bool:
        """Whether ``text`` contains a secret-shaped substring."""
        return bool(text) and self._pattern.search(text) is not None

    def scrub(self, value: Any, key: str | None = None) -> Any:
        """Recursively redact a value found under ``key``.

        Mappings keep their keys and have their values scrubbed; lists and
        tuples keep their type. Values under a sensitive key are replaced
        entirely unless they are empty or None.
        """
        if key is not None and self.is_sensitive_key(key) and value:
            return self.placeholder
        if isinstance(value, str):
            return self.redact(value)
        if isinstance(value, Mapping):
            return {k: self.scrub(v, key=str(k)) for k, v in value.items()}
        if type(value) in (list, tuple):
            return type(value)(self.scrub(v) for v in value)
        return value
