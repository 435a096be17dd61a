"""Domain models for the ERPNext bridge.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Record payloads are open mappings; their shape belongs to the remote DocType.
RecordPayload: TypeAlias = dict[str, Any]


@dataclass(frozen=True)
class ConnectionConfig:
    """Resolved connection settings handed to the remote adapter.

    The base URL is normalized (no trailing slash) on creation. Token
    authentication is only possible when both halves of the credential
    pair are present.
    """

    base_url: str
    api_key: str | None = None
    api_secret: str | None = None
    timeout_seconds: float = 30.0
    debug: bool = False

    def __post_init__(self) -> None:
        """Normalize the base URL and validate the timeout."""
        object.__setattr__(self, "base_url", (self.base_url or "").strip().rstrip("/"))
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )

    @property
    def has_token_credentials(self) -> bool:
        """True when both API key and secret are configured."""
        return bool(self.api_key) and bool(self.api_secret)


@dataclass(frozen=True)
class RecordRef:
    """A (DocType, name) pair identifying one remote record."""

    doctype: str
    name: str

    def __str__(self) -> str:
        return f'{self.doctype} "{self.name}"'


@dataclass(frozen=True)
class FieldDefinition:
    """One DocField row as returned by the field-definition listing."""

    fieldname: str
    fieldtype: str
    label: str | None = None
    options: str | None = None
    reqd: int = 0
    idx: int = 0
    in_list_view: int = 0
    read_only: int = 0
    hidden: int = 0
    default: str | None = None
    description: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FieldDefinition":
        """Build from a raw DocField mapping, ignoring unknown keys."""
        return cls(
            fieldname=payload.get("fieldname") or "",
            fieldtype=payload.get("fieldtype") or "",
            label=payload.get("label"),
            options=payload.get("options"),
            reqd=int(payload.get("reqd") or 0),
            idx=int(payload.get("idx") or 0),
            in_list_view=int(payload.get("in_list_view") or 0),
            read_only=int(payload.get("read_only") or 0),
            hidden=int(payload.get("hidden") or 0),
            default=payload.get("default"),
            description=payload.get("description"),
        )


@dataclass(frozen=True)
class Workflow:
    """A workflow definition for one DocType.

    States and transitions are forwarded exactly as supplied, including
    keys such as ``update_field`` or ``allow_self_approval``. Their
    contents are validated by ERPNext, not here.
    """

    workflow_name: str
    document_type: str
    states: tuple[RecordPayload, ...] = ()
    transitions: tuple[RecordPayload, ...] = ()
    is_active: bool = True

    def to_payload(self) -> dict[str, Any]:
        return {
            "doctype": "Workflow",
            "workflow_name": self.workflow_name,
            "document_type": self.document_type,
            "is_active": 1 if self.is_active else 0,
            "states": [dict(s) for s in self.states],
            "transitions": [dict(t) for t in self.transitions],
        }


@dataclass(frozen=True)
class PropertyOverride:
    """A Property Setter targeting a DocType or one of its fields."""

    doctype: str
    property: str
    value: str
    fieldname: str | None = None

    @property
    def doctype_or_field(self) -> str:
        return "DocField" if self.fieldname else "DocType"


# ============================================================================
# ERROR PAYLOADS
# ============================================================================
#
# ERPNext reports failures in several body shapes which may coexist in a
# single response. Each shape is one variant of ErrorPayload; the
# normalizer resolves them in a fixed priority order.


@dataclass(frozen=True)
class ServerMessages:
    """Decoded ``_server_messages`` entries (before blank filtering)."""

    messages: tuple[str, ...]


@dataclass(frozen=True)
class PlainMessage:
    """A string ``message`` field."""

    message: str


@dataclass(frozen=True)
class ExceptionTrace:
    """A multi-line Python traceback from the ``exception`` field."""

    trace: str


@dataclass(frozen=True)
class TypedException:
    """An ``exc_type`` field with its optional message."""

    exc_type: str
    message: str | None = None


@dataclass(frozen=True)
class ErrorMessageField:
    """An ``_error_message`` field."""

    message: str


ErrorPayload: TypeAlias = (
    ServerMessages | PlainMessage | ExceptionTrace | TypedException | ErrorMessageField
)


@dataclass(frozen=True)
class ErrorContext:
    """Everything known about one failed remote call.

    ``body`` is the decoded response body (any JSON shape) or None when
    there was no response or it was not JSON.
    """

    status_code: int | None = None
    body: Any = None
    exception: BaseException | None = None
