"""ERPNext REST adapter.

Implements ERPNextPort on top of the Frappe REST API:

- ``/api/resource/<doctype>[/<name>]`` for document CRUD
- ``/api/method/<dotted.path>`` for login, submit, cancel, reports,
  metadata and field listings

Every call goes through ``_request``, which unwraps nothing itself but
turns any HTTP or transport failure into an ``ERPNextError`` whose
message comes from ErrorNormalizer.
"""

import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from erpnext_mcp.core.errors import ConfigurationError, ERPNextError
from erpnext_mcp.core.models import (
    ConnectionConfig,
    ErrorContext,
    FieldDefinition,
    PropertyOverride,
    RecordPayload,
    RecordRef,
    Workflow,
)
from erpnext_mcp.core.naming import custom_field_name, property_setter_name
from erpnext_mcp.core.normalizer import ErrorNormalizer
from erpnext_mcp.core.ports import ERPNextPort

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/method/login"
LOGIN_CONFIRMATION = "Logged In"

DOCFIELD_COLUMNS = [
    "fieldname",
    "label",
    "fieldtype",
    "options",
    "reqd",
    "default",
    "description",
    "in_list_view",
    "read_only",
    "hidden",
    "idx",
]

DEFAULT_DOCTYPE_PERMISSIONS = [
    {"role": "System Manager", "read": 1, "write": 1, "create": 1, "delete": 1}
]


def _segment(value: str) -> str:
    """Percent-escape a value used as one URL path segment."""
    return quote(str(value), safe="")


def _resource_path(doctype: str, name: str | None = None) -> str:
    path = f"/api/resource/{_segment(doctype)}"
    if name is not None:
        path += f"/{_segment(name)}"
    return path


def _json_or_none(response: httpx.Response) -> Any:
    """Decode a response body as JSON, or None if it is not JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return None


def _unwrap(body: Any, key: str) -> Any:
    if isinstance(body, dict):
        return body.get(key)
    return None


class ERPNextClient(ERPNextPort):
    """ERPNext-backed adapter via the Frappe REST API."""

    def __init__(
        self,
        config: ConnectionConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the ERPNext adapter.

        Args:
            config: Resolved connection settings.
            transport: Optional httpx transport (used to stub the remote in tests).

        Raises:
            ConfigurationError: If no base URL is configured.
        """
        if not config.base_url:
            raise ConfigurationError("ERPNEXT_URL environment variable is required")

        self.config = config
        self.base_url = config.base_url
        self._authenticated = False

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if config.has_token_credentials:
            headers["Authorization"] = f"token {config.api_key}:{config.api_secret}"
            self._authenticated = True

        event_hooks: dict[str, list[Any]] = {}
        if config.debug:
            event_hooks = {
                "request": [self._log_request],
                "response": [self._log_response],
            }

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
            event_hooks=event_hooks,
        )

    async def __aenter__(self) -> "ERPNextClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    def is_authenticated(self) -> bool:
        return self._authenticated

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
    ) -> httpx.Response:
        """Issue one request and raise for non-2xx responses.

        Raises:
            httpx.HTTPStatusError: On a non-success status.
            httpx.RequestError: On timeouts and connection failures.
        """
        response = await self.client.request(
            method,
            path,
            params=params,
            json=payload,
        )
        response.raise_for_status()
        return response

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            operation: Label used as the prefix of any error message.

        Raises:
            ERPNextError: On any HTTP or transport failure.
        """
        try:
            response = await self._send(method, path, params=params, payload=payload)
        except httpx.HTTPError as e:
            raise self._error(operation, self._error_context(e)) from e
        return _json_or_none(response)

    @staticmethod
    def _error_context(error: httpx.HTTPError) -> ErrorContext:
        if isinstance(error, httpx.HTTPStatusError):
            return ErrorContext(
                status_code=error.response.status_code,
                body=_json_or_none(error.response),
                exception=error,
            )
        return ErrorContext(exception=error)

    @staticmethod
    def _error(operation: str, context: ErrorContext) -> ERPNextError:
        message = ErrorNormalizer.format(operation, context)
        logger.warning(message)
        return ERPNextError(
            message,
            operation=operation,
            status_code=context.status_code,
            detail=ErrorNormalizer.extract_detail(context),
        )

    @staticmethod
    def _params(**values: Any) -> dict[str, Any]:
        """Build query parameters, dropping unset values."""
        return {k: v for k, v in values.items() if v is not None}

    async def _log_request(self, request: httpx.Request) -> None:
        body = request.content.decode("utf-8", errors="replace")
        if request.url.path == LOGIN_PATH:
            body = "<credentials omitted>"
        logger.debug(f"API Request {request.method} {request.url} {body}".rstrip())

    async def _log_response(self, response: httpx.Response) -> None:
        request = response.request
        await response.aread()
        label = "API Error" if response.is_error else "API Response"
        logger.debug(
            f"{label} {request.method} {request.url} -> {response.status_code}: "
            f"{response.text}"
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def authenticate(self, username: str, password: str) -> bool:
        """Log in with username and password; the session cookie is kept."""
        body = await self._request(
            "Authentication failed",
            "POST",
            LOGIN_PATH,
            payload={"usr": username, "pwd": password},
        )
        if _unwrap(body, "message") == LOGIN_CONFIRMATION:
            self._authenticated = True
            logger.info(f"Authenticated with ERPNext as {username}")
            return True
        return False

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def get_document(self, doctype: str, name: str) -> RecordPayload:
        ref = RecordRef(doctype, name)
        body = await self._request(
            f"Failed to get {ref}", "GET", _resource_path(doctype, name)
        )
        return _unwrap(body, "data")

    async def get_doc_list(
        self,
        doctype: str,
        filters: dict[str, Any] | None = None,
        fields: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[RecordPayload]:
        params = self._params(
            fields=json.dumps(list(fields)) if fields else None,
            filters=json.dumps(filters) if filters else None,
            limit_page_length=limit if limit else None,
        )
        body = await self._request(
            f"Failed to get {doctype} list", "GET", _resource_path(doctype), params=params
        )
        return _unwrap(body, "data")

    async def create_document(self, doctype: str, doc: dict[str, Any]) -> RecordPayload:
        logger.debug(f"Creating {doctype}", extra={"doc": doc})
        body = await self._request(
            f"Failed to create {doctype}", "POST", _resource_path(doctype), payload=doc
        )
        return _unwrap(body, "data")

    async def update_document(
        self, doctype: str, name: str, doc: dict[str, Any]
    ) -> RecordPayload:
        ref = RecordRef(doctype, name)
        logger.debug(f"Updating {ref}", extra={"doc": doc})
        body = await self._request(
            f"Failed to update {ref}", "PUT", _resource_path(doctype, name), payload=doc
        )
        return _unwrap(body, "data")

    async def delete_document(self, doctype: str, name: str) -> bool:
        ref = RecordRef(doctype, name)
        logger.debug(f"Deleting {ref}")
        await self._request(f"Failed to delete {ref}", "DELETE", _resource_path(doctype, name))
        return True

    async def submit_document(self, doctype: str, name: str) -> Any:
        ref = RecordRef(doctype, name)
        logger.debug(f"Submitting {ref}")
        body = await self._request(
            f"Failed to submit {ref}",
            "POST",
            "/api/method/frappe.client.submit",
            payload={"doc": {"doctype": doctype, "name": name}},
        )
        return _unwrap(body, "message")

    async def cancel_document(self, doctype: str, name: str) -> Any:
        ref = RecordRef(doctype, name)
        logger.debug(f"Cancelling {ref}")
        body = await self._request(
            f"Failed to cancel {ref}",
            "POST",
            "/api/method/frappe.client.cancel",
            payload={"doctype": doctype, "name": name},
        )
        return _unwrap(body, "message")

    async def run_report(
        self, report_name: str, filters: dict[str, Any] | None = None
    ) -> Any:
        params = self._params(
            report_name=report_name,
            filters=json.dumps(filters) if filters is not None else None,
        )
        body = await self._request(
            f'Failed to run report "{report_name}"',
            "GET",
            "/api/method/frappe.desk.query_report.run",
            params=params,
        )
        return _unwrap(body, "message")

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def get_all_doctypes(self) -> list[str]:
        body = await self._request(
            "Failed to get DocTypes",
            "GET",
            _resource_path("DocType"),
            params={"fields": json.dumps(["name"]), "limit_page_length": 0},
        )
        rows = _unwrap(body, "data") or []
        return sorted(row["name"] for row in rows if row.get("name"))

    async def get_doctype_fields(self, doctype: str) -> list[FieldDefinition]:
        # Ordering is requested from ERPNext, not re-applied here.
        body = await self._request(
            f"Failed to get fields for {doctype}",
            "GET",
            "/api/method/frappe.client.get_list",
            params={
                "doctype": "DocField",
                "filters": json.dumps({"parent": doctype}),
                "fields": json.dumps(DOCFIELD_COLUMNS),
                "limit_page_length": 0,
                "order_by": "idx asc",
            },
        )
        rows = _unwrap(body, "message") or []
        return [FieldDefinition.from_payload(row) for row in rows]

    async def get_doctype_meta(self, doctype: str) -> Any:
        try:
            response = await self._send(
                "GET",
                "/api/method/frappe.desk.form.utils.get_meta",
                params={"doctype": doctype},
            )
        except httpx.HTTPError as e:
            first_failure = self._error_context(e)
            logger.info(f"Metadata endpoint failed for {doctype}, falling back to DocType record")
            try:
                return await self.get_document("DocType", doctype)
            except ERPNextError:
                raise self._error(f"Failed to get metadata for {doctype}", first_failure) from e
        return _unwrap(_json_or_none(response), "message")

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
        doc: dict[str, Any] = {
            "doctype": "DocType",
            "name": name,
            "module": module,
            "custom": 1,
            "fields": list(fields),
            "is_submittable": 1 if is_submittable else 0,
            "istable": 1 if is_child_table else 0,
        }
        if autoname:
            doc["autoname"] = autoname
        if title_field:
            doc["title_field"] = title_field
        doc["permissions"] = list(permissions) if permissions else DEFAULT_DOCTYPE_PERMISSIONS

        logger.debug("Creating DocType", extra={"doc": doc})
        body = await self._request(
            f'Failed to create DocType "{name}"', "POST", _resource_path("DocType"), payload=doc
        )
        return _unwrap(body, "data")

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
        doc: dict[str, Any] = {
            "doctype": "Custom Field",
            "dt": doctype,
            "fieldname": fieldname,
            "fieldtype": fieldtype,
            "label": label,
            "name": custom_field_name(doctype, fieldname),
        }
        if options:
            doc["options"] = options
        if reqd is not None:
            doc["reqd"] = reqd
        if insert_after:
            doc["insert_after"] = insert_after
        if description:
            doc["description"] = description
        if default:
            doc["default"] = default

        logger.debug("Creating Custom Field", extra={"doc": doc})
        body = await self._request(
            f'Failed to add custom field "{fieldname}" to {doctype}',
            "POST",
            _resource_path("Custom Field"),
            payload=doc,
        )
        return _unwrap(body, "data")

    async def create_property_setter(
        self,
        doctype: str,
        property_name: str,
        value: str,
        fieldname: str | None = None,
    ) -> RecordPayload:
        override = PropertyOverride(doctype, property_name, value, fieldname)
        doc: dict[str, Any] = {
            "doctype": "Property Setter",
            "name": property_setter_name(doctype, property_name, fieldname),
            "doc_type": override.doctype,
            "property": override.property,
            "value": override.value,
            "property_type": "Data",
            "doctype_or_field": override.doctype_or_field,
        }
        if override.fieldname:
            doc["field_name"] = override.fieldname

        logger.debug("Creating Property Setter", extra={"doc": doc})
        body = await self._request(
            f"Failed to create property setter for {doctype}",
            "POST",
            _resource_path("Property Setter"),
            payload=doc,
        )
        return _unwrap(body, "data")

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def get_workflow(self, doctype: str) -> RecordPayload | None:
        body = await self._request(
            f"Failed to get workflow for {doctype}",
            "GET",
            _resource_path("Workflow"),
            params={
                "filters": json.dumps({"document_type": doctype, "is_active": 1}),
                "limit_page_length": 1,
            },
        )
        names = [row["name"] for row in _unwrap(body, "data") or [] if row.get("name")]
        if not names:
            return None
        # Several active workflows is a remote misconfiguration; take the first.
        return await self.get_document("Workflow", names[0])

    async def create_workflow(
        self,
        workflow_name: str,
        document_type: str,
        states: Sequence[RecordPayload],
        transitions: Sequence[RecordPayload],
        is_active: bool = True,
    ) -> RecordPayload:
        workflow = Workflow(
            workflow_name=workflow_name,
            document_type=document_type,
            states=tuple(states),
            transitions=tuple(transitions),
            is_active=is_active,
        )
        doc = workflow.to_payload()
        logger.debug("Creating Workflow", extra={"doc": doc})
        body = await self._request(
            f'Failed to create workflow "{workflow_name}"',
            "POST",
            _resource_path("Workflow"),
            payload=doc,
        )
        return _unwrap(body, "data")

    async def update_workflow(self, name: str, updates: dict[str, Any]) -> RecordPayload:
        logger.debug(f'Updating Workflow "{name}"', extra={"updates": updates})
        body = await self._request(
            f'Failed to update workflow "{name}"',
            "PUT",
            _resource_path("Workflow", name),
            payload=updates,
        )
        return _unwrap(body, "data")
