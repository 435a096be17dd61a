"""Error normalization for ERPNext responses.

ERPNext (Frappe) reports failures in at least five body shapes depending
on the endpoint and failure mode. This module reduces any failed-call
context to a single readable string, always preferring the most specific
detail available:

1. ``_server_messages`` (JSON-encoded list, entries may be JSON objects)
2. string ``message``
3. ``exception`` traceback (known exception class line, else first line)
4. ``exc_type`` summary
5. ``_error_message``
6. HTTP status description
7. transport exception message
8. generic fallback
"""

import json
import re
from typing import Any

from .models import (
    ErrorContext,
    ErrorMessageField,
    ErrorPayload,
    ExceptionTrace,
    PlainMessage,
    ServerMessages,
    TypedException,
)

UNKNOWN_ERROR = "Unknown error occurred"

STATUS_DESCRIPTIONS: dict[int, str] = {
    400: "Bad Request - Invalid data sent to ERPNext",
    401: "Unauthorized - Check your API key and secret",
    403: "Forbidden - You do not have permission for this operation",
    404: "Not Found - The requested resource does not exist",
    409: "Conflict - Document may have been modified by another user",
    417: "Expectation Failed - Validation error in ERPNext",
    500: "Internal Server Error - ERPNext encountered an error",
    502: "Bad Gateway - ERPNext server is not responding",
    503: "Service Unavailable - ERPNext is temporarily unavailable",
}

KNOWN_EXCEPTION_CLASSES = (
    "ValidationError",
    "MandatoryError",
    "LinkValidationError",
    "DuplicateEntryError",
    "TimestampMismatchError",
)

_EXCEPTION_LINE = re.compile(
    r"(?:" + "|".join(KNOWN_EXCEPTION_CLASSES) + r"):\s*(.+?)(?:\n|$)"
)


class ErrorNormalizer:
    """Turns failed-call contexts into diagnostic strings.

    Pure functions over plain data. All methods are static as the class
    carries no state, and none of them raise.
    """

    @staticmethod
    def classify(body: Any) -> list[ErrorPayload]:
        """Return every error shape present in a response body, by priority.

        A body may carry several shapes at once (e.g. ``_server_messages``
        alongside ``exc_type``); all of them are returned so the caller can
        fall through when a higher-priority one turns out to be empty.
        """
        if not isinstance(body, dict):
            return []

        payloads: list[ErrorPayload] = []

        server_messages = ErrorNormalizer._decode_server_messages(
            body.get("_server_messages")
        )
        if server_messages is not None:
            payloads.append(ServerMessages(server_messages))

        message = body.get("message")
        if isinstance(message, str) and message:
            payloads.append(PlainMessage(message))

        exception = body.get("exception")
        if exception:
            payloads.append(ExceptionTrace(str(exception)))

        exc_type = body.get("exc_type")
        if exc_type:
            detail = body.get("message") or body.get("exc")
            payloads.append(
                TypedException(str(exc_type), str(detail) if detail else None)
            )

        error_message = body.get("_error_message")
        if error_message:
            payloads.append(ErrorMessageField(str(error_message)))

        return payloads

    @staticmethod
    def render(payload: ErrorPayload) -> str | None:
        """Render one error shape, or None when it yields nothing usable."""
        if isinstance(payload, ServerMessages):
            kept = [m.strip() for m in payload.messages if m and m.strip()]
            return "; ".join(kept) if kept else None

        if isinstance(payload, ExceptionTrace):
            found = _EXCEPTION_LINE.search(payload.trace)
            if found:
                return found.group(0).strip()
            return payload.trace.split("\n")[0] or None

        if isinstance(payload, TypedException):
            return f"{payload.exc_type}: {payload.message or 'Unknown error'}"

        # PlainMessage and ErrorMessageField
        return payload.message or None

    @staticmethod
    def extract_detail(context: ErrorContext) -> str:
        """Reduce an error context to one non-empty diagnostic string."""
        detail, _ = ErrorNormalizer._resolve(context)
        return detail

    @staticmethod
    def format(operation: str, context: ErrorContext) -> str:
        """Prefix the normalized detail with an operation label and status.

        Example: ``Failed to create Customer (HTTP 417): ValidationError: ...``
        """
        detail, status_description = ErrorNormalizer._resolve(context)
        if not context.status_code:
            return f"{operation}: {detail}"

        # The status segment already names the code; only the table text is kept.
        if status_description is not None:
            detail = status_description
        return f"{operation} (HTTP {context.status_code}): {detail}"

    @staticmethod
    def _resolve(context: ErrorContext) -> tuple[str, str | None]:
        """Return the detail and, when it came from the status table, its description."""
        for payload in ErrorNormalizer.classify(context.body):
            rendered = ErrorNormalizer.render(payload)
            if rendered:
                return rendered, None

        description = STATUS_DESCRIPTIONS.get(context.status_code or 0)
        if description is not None:
            return f"HTTP {context.status_code}: {description}", description

        if context.exception is not None:
            transport_message = str(context.exception)
            if transport_message:
                return transport_message, None

        return UNKNOWN_ERROR, None

    @staticmethod
    def _decode_server_messages(raw: Any) -> tuple[str, ...] | None:
        """Decode the ``_server_messages`` field.

        The field is a JSON-encoded list whose entries are usually
        themselves JSON-encoded objects with a ``message`` (or ``msg``) key.
        Returns None when the field is absent or not decodable.
        """
        if not raw:
            return None

        if isinstance(raw, str):
            try:
                decoded = json.loads(raw)
            except (json.JSONDecodeError, ValueError):
                return None
        else:
            decoded = raw

        if not isinstance(decoded, list):
            return None

        return tuple(ErrorNormalizer._decode_server_message(entry) for entry in decoded)

    @staticmethod
    def _decode_server_message(entry: Any) -> str:
        obj = entry
        if isinstance(entry, str):
            try:
                obj = json.loads(entry)
            except (json.JSONDecodeError, ValueError):
                return entry

        if isinstance(obj, dict):
            text = obj.get("message") or obj.get("msg")
            if text:
                return str(text)
            return entry if isinstance(entry, str) else ""

        if isinstance(entry, str):
            return entry
        return "" if entry is None else str(entry)
