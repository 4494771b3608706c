"""Secret redaction for log output: credentials and secure parameter values."""

import json
import logging
import os
import re

# Env vars whose values should be redacted from all output
_SECRET_ENV_VARS = [
    "AZURE_ACCESS_TOKEN",
    "AZURE_CLIENT_SECRET",
    "ARM_ACCESS_TOKEN",
]

_MIN_SECRET_LENGTH = 8  # env values only; skip short ones to avoid false positives

# Values registered at runtime, e.g. securestring template parameters
_registered: set[str] = set()


def _collect_secret_values() -> set[str]:
    values = set()
    for var in _SECRET_ENV_VARS:
        val = os.environ.get(var, "")
        if len(val) >= _MIN_SECRET_LENGTH:
            values.add(val)
    return values | _registered


def _build_patterns(values: set[str]) -> list[re.Pattern]:
    # Sort by length descending so longer values match first
    return [re.compile(re.escape(v)) for v in sorted(values, key=len, reverse=True)]


# Lazy-initialized module cache
_patterns: list[re.Pattern] | None = None


def _get_patterns() -> list[re.Pattern]:
    global _patterns
    if _patterns is None:
        _patterns = _build_patterns(_collect_secret_values())
    return _patterns


def _secret_strings(value):
    """String leaves of a secure value; objects and arrays are walked."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _secret_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _secret_strings(item)


def register_secret(value) -> None:
    """Redact ``value`` from all subsequent log output.

    Registered values have no minimum length. Every string inside a
    secureObject value is registered, each in raw and JSON-escaped form
    so that serialized request payloads are masked too.
    """
    global _patterns
    for text in _secret_strings(value):
        if not text:
            continue
        _registered.add(text)
        _registered.add(json.dumps(text)[1:-1])
        _registered.add(json.dumps(text, ensure_ascii=False)[1:-1])
    _patterns = None


def redact_secrets(text: str) -> str:
    """Replace known secret values with '***'."""
    return _apply(text, _get_patterns())


def _apply(text: str, patterns: list[re.Pattern]) -> str:
    for p in patterns:
        text = p.sub("***", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Logging filter that replaces secret values in log records with '***'.

    Attached to the CLI output handler so records from every logger pass it.
    Handles both f-string messages (msg is pre-formatted) and
    %-style messages (msg + args).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        patterns = _get_patterns()
        if patterns:
            record.msg = _apply(str(record.msg), patterns)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: _apply(v, patterns) if isinstance(v, str) else v for k, v in record.args.items()}
                elif isinstance(record.args, tuple):
                    record.args = tuple(_apply(a, patterns) if isinstance(a, str) else a for a in record.args)
        return True
