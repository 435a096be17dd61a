"""Port interface for the ERPNext bridge.

This abstract base class defines the boundary between the protocol
front end and the remote ERPNext system. The front end (driving side)
only ever talks to ``ERPNextPort``; the HTTP implementation lives in
the adapters/ package.

Every operation performs exactly one logical remote call and either
returns the unwrapped business payload or raises ``ERPNextError``
whose message is already normalized for display.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .models import FieldDefinition, RecordPayload


class ERPNextPort(ABC):
    """Port for reading and changing records, metadata, and workflows.

    Implementations must:
    - Escape DocType and document names used as URL path segments
    - Unwrap ERPNext's ``data`` / ``message`` envelopes
    - Convert every failure into a single ``ERPNextError``
    - Never retry on their own
    """

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Whether calls will be sent with valid credentials.

        True from construction when token credentials are configured,
        otherwise only after a successful ``authenticate``.
        """

    @abstractmethod
    async def authenticate(self, username: str, password: str) -> bool:
        """Open a session with username and password.

        Returns:
            True only if ERPNext confirms the login.

        Raises:
            ERPNextError: If the login request fails.
        """

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_document(self, doctype: str, name: str) -> RecordPayload:
        """Fetch a single document.

        Raises:
            ERPNextError: If the document cannot be fetched.
        """

    @abstractmethod
    async def get_doc_list(
        self,
        doctype: str,
        filters: dict[str, Any] | None = None,
        fields: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[RecordPayload]:
        """List documents of a DocType.

        Args:
            doctype: DocType to list.
            filters: Filter mapping; omitted from the request when empty.
            fields: Field names to return; omitted when empty.
            limit: Maximum number of rows; no limit is sent when None.

        Raises:
            ERPNextError: If the listing fails.
        """

    @abstractmethod
    async def create_document(self, doctype: str, doc: dict[str, Any]) -> RecordPayload:
        """Create a document and return it with its assigned name."""

    @abstractmethod
    async def update_document(
        self, doctype: str, name: str, doc: dict[str, Any]
    ) -> RecordPayload:
        """Partially update a document; unspecified fields are untouched."""

    @abstractmethod
    async def delete_document(self, doctype: str, name: str) -> bool:
        """Delete a document. Returns True on success."""

    @abstractmethod
    async def submit_document(self, doctype: str, name: str) -> Any:
        """Submit a draft document (docstatus 0 -> 1).

        Legality of the transition is enforced by ERPNext.
        """

    @abstractmethod
    async def cancel_document(self, doctype: str, name: str) -> Any:
        """Cancel a submitted document (docstatus 1 -> 2)."""

    @abstractmethod
    async def run_report(
        self, report_name: str, filters: dict[str, Any] | None = None
    ) -> Any:
        """Run a query report and return its result payload."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_all_doctypes(self) -> list[str]:
        """Return every DocType name, sorted lexicographically."""

    @abstractmethod
    async def get_doctype_fields(self, doctype: str) -> list[FieldDefinition]:
        """Return the DocType's field definitions ordered by ``idx``."""

    @abstractmethod
    async def get_doctype_meta(self, doctype: str) -> Any:
        """Return full DocType metadata.

        Falls back to the DocType document itself when the metadata
        endpoint fails; the error reported is that of the first failure.
        """

    @abstractmethod
    async def create_doctype(
        self,
        name: str,
        module: str,
        fields: Sequence[dict[str, Any]],
        is_submittable: bool = False,
        is_child_table: bool = False,
        autoname: str | None = None,
        title_field: str | None = None,
        permissions: Sequence[dict[str, Any]] | None = None,
    ) -> RecordPayload:
        """Create a custom DocType."""

    @abstractmethod
    async def add_custom_field(
        self,
        doctype: str,
        fieldname: str,
        fieldtype: str,
        label: str,
        options: str | None = None,
        reqd: int | None = None,
        insert_after: str | None = None,
        description: str | None = None,
        default: str | None = None,
    ) -> RecordPayload:
        """Attach a Custom Field to a DocType."""

    @abstractmethod
    async def create_property_setter(
        self,
        doctype: str,
        property_name: str,
        value: str,
        fieldname: str | None = None,
    ) -> RecordPayload:
        """Override a DocType or field property via a Property Setter."""

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_workflow(self, doctype: str) -> RecordPayload | None:
        """Return the active workflow for a DocType, or None if there is none."""

    @abstractmethod
    async def create_workflow(
        self,
        workflow_name: str,
        document_type: str,
        states: Sequence[RecordPayload],
        transitions: Sequence[RecordPayload],
        is_active: bool = True,
    ) -> RecordPayload:
        """Create a workflow. States and transitions are sent unchanged."""

    @abstractmethod
    async def update_workflow(self, name: str, updates: dict[str, Any]) -> RecordPayload:
        """Partially update a workflow."""
