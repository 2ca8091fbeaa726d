"""
Sink context validation utilities.

Provides both minimal always-on validation and optional full JSON schema
validation (requires the [jsonschema] extra).
"""

from __future__ import annotations

import math
from collections.abc import Collection, Mapping
from typing import Any

from txn_file_sink.errors import ConfigurationError

_NUMERIC_KEYS = (
    "poll.timeout",
    "poll.backoff.initial",
    "poll.backoff.max",
    "max.bytes.to.log",
)

_DECODE_ERROR_POLICIES = {"strict", "replace", "backslashreplace"}


def coerce_number(key: str, value: Any) -> float:
    """
    Convert a context value to a non-negative float.

    Args:
        key: Context key, used in the error message.
        value: An int, float, or numeric string.

    Returns:
        The parsed value.

    Raises:
        ConfigurationError: If the value is not a non-negative number.
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ConfigurationError(f"{key} must be a finite number, got {value!r}")
    if number < 0:
        raise ConfigurationError(f"{key} must be >= 0, got {value!r}")
    return number


def validate_context_minimal(
    context: Mapping[str, Any],
    required: Collection[str] = ("filename",),
) -> None:
    """
    Perform minimal validation on a sink context.

    Checks:
    - All required keys are present and hold non-empty strings
    - Numeric poll settings parse as non-negative numbers
    - decode.errors, if set, names a supported policy

    Args:
        context: Flat property map supplied by the host.
        required: Keys that must be present.

    Raises:
        ConfigurationError: If the context fails validation.
    """
    missing = set(required) - set(context.keys())
    if missing:
        raise ConfigurationError(f"Missing required keys: {sorted(missing)}")

    for key in required:
        value = context[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"{key} must be a non-empty string, got {value!r}")

    for key in _NUMERIC_KEYS:
        if key in context:
            coerce_number(key, context[key])

    policy = context.get("decode.errors")
    if policy is not None and policy not in _DECODE_ERROR_POLICIES:
        raise ConfigurationError(
            f"Unsupported decode.errors: {policy!r} (expected one of {sorted(_DECODE_ERROR_POLICIES)})"
        )


def validate_context(
    context: Mapping[str, Any],
    required: Collection[str] = ("filename",),
) -> None:
    """
    Validate a sink context against the vendored JSON schema.

    Runs :func:`validate_context_minimal` first. Requires the ``jsonschema``
    package (install with ``pip install txn-file-sink[jsonschema]``).

    Args:
        context: Flat property map supplied by the host.
        required: Keys that must be present.

    Raises:
        ConfigurationError: If the context fails validation.
        ImportError: If the jsonschema package is not installed.
    """
    try:
        import jsonschema
    except ImportError:
        raise ImportError(
            "jsonschema is required for full schema validation. "
            "Install with: pip install txn-file-sink[jsonschema]"
        ) from None

    from txn_file_sink.schema import load_schema

    validate_context_minimal(context, required)

    schema = load_schema()
    try:
        jsonschema.validate(instance=dict(context), schema=schema)
    except jsonschema.ValidationError as exc:
        raise ConfigurationError(str(exc.message)) from exc
