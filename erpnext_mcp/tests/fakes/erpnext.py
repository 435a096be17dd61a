"""Fake ERPNextPort implementation for testing."""

from collections.abc import Sequence
from typing import Any

from erpnext_mcp.core.models import FieldDefinition, RecordPayload
from erpnext_mcp.core.naming import custom_field_name, property_setter_name
from erpnext_mcp.core.ports import ERPNextPort


class FakeERPNextPort(ERPNextPort):
    """In-memory ERPNext adapter for testing.

    Stores documents per DocType, records every call as ``(method, args)``
    in ``calls``, and can be told to raise on the next call.
    """

    def __init__(self, authenticated: bool = True) -> None:
        """Initialize with empty collections."""
        self.authenticated = authenticated
        self.documents: dict[str, dict[str, RecordPayload]] = {}
        self.fields: dict[str, list[FieldDefinition]] = {}
        self.workflows: dict[str, RecordPayload] = {}
        self.report_results: dict[str, Any] = {}
        self.valid_credentials: tuple[str, str] = ("admin", "secret")
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._error_to_raise: Exception | None = None

    def set_error(self, error: Exception) -> None:
        """Configure the fake to raise an error on the next call."""
        self._error_to_raise = error

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self._error_to_raise:
            error, self._error_to_raise = self._error_to_raise, None
            raise error

    def is_authenticated(self) -> bool:
        return self.authenticated

    async def authenticate(self, username: str, password: str) -> bool:
        self._record("authenticate", username, password)
        if (username, password) == self.valid_credentials:
            self.authenticated = True
            return True
        return False

    async def get_document(self, doctype: str, name: str) -> RecordPayload:
        self._record("get_document", doctype, name)
        return self.documents[doctype][name]

    async def get_doc_list(
        self,
        doctype: str,
        filters: dict[str, Any] | None = None,
        fields: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[RecordPayload]:
        self._record("get_doc_list", doctype, filters, fields, limit)
        rows = list(self.documents.get(doctype, {}).values())
        if filters:
            rows = [r for r in rows if all(r.get(k) == v for k, v in filters.items())]
        if limit:
            rows = rows[:limit]
        if fields:
            rows = [{f: r.get(f) for f in fields} for r in rows]
        return rows

    async def create_document(self, doctype: str, doc: dict[str, Any]) -> RecordPayload:
        self._record("create_document", doctype, doc)
        bucket = self.documents.setdefault(doctype, {})
        created = {"name": f"{doctype.upper()}-{len(bucket) + 1:04d}", **doc, "docstatus": 0}
        bucket[created["name"]] = created
        return created

    async def update_document(
        self, doctype: str, name: str, doc: dict[str, Any]
    ) -> RecordPayload:
        self._record("update_document", doctype, name, doc)
        self.documents[doctype][name].update(doc)
        return self.documents[doctype][name]

    async def delete_document(self, doctype: str, name: str) -> bool:
        self._record("delete_document", doctype, name)
        self.documents.get(doctype, {}).pop(name, None)
        return True

    async def submit_document(self, doctype: str, name: str) -> Any:
        self._record("submit_document", doctype, name)
        doc = self.documents[doctype][name]
        doc["docstatus"] = 1
        return doc

    async def cancel_document(self, doctype: str, name: str) -> Any:
        self._record("cancel_document", doctype, name)
        doc = self.documents[doctype][name]
        doc["docstatus"] = 2
        return doc

    async def run_report(
        self, report_name: str, filters: dict[str, Any] | None = None
    ) -> Any:
        self._record("run_report", report_name, filters)
        return self.report_results.get(report_name, {"result": [], "columns": []})

    async def get_all_doctypes(self) -> list[str]:
        self._record("get_all_doctypes")
        return sorted(self.documents)

    async def get_doctype_fields(self, doctype: str) -> list[FieldDefinition]:
        self._record("get_doctype_fields", doctype)
        return self.fields.get(doctype, [])

    async def get_doctype_meta(self, doctype: str) -> Any:
        self._record("get_doctype_meta", doctype)
        return {"name": doctype, "fields": self.fields.get(doctype, [])}

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
        self._record(
            "create_doctype",
            name,
            module,
            fields,
            is_submittable,
            is_child_table,
            autoname,
            title_field,
            permissions,
        )
        return {"name": name, "module": module, "fields": list(fields)}

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
        self._record(
            "add_custom_field",
            doctype,
            fieldname,
            fieldtype,
            label,
            options,
            reqd,
            insert_after,
            description,
            default,
        )
        return {"name": custom_field_name(doctype, fieldname), "dt": doctype}

    async def create_property_setter(
        self,
        doctype: str,
        property_name: str,
        value: str,
        fieldname: str | None = None,
    ) -> RecordPayload:
        self._record("create_property_setter", doctype, property_name, value, fieldname)
        return {
            "name": property_setter_name(doctype, property_name, fieldname),
            "value": value,
        }

    async def get_workflow(self, doctype: str) -> RecordPayload | None:
        self._record("get_workflow", doctype)
        return self.workflows.get(doctype)

    async def create_workflow(
        self,
        workflow_name: str,
        document_type: str,
        states: Sequence[RecordPayload],
        transitions: Sequence[RecordPayload],
        is_active: bool = True,
    ) -> RecordPayload:
        self._record(
            "create_workflow", workflow_name, document_type, states, transitions, is_active
        )
        workflow = {
            "name": workflow_name,
            "document_type": document_type,
            "is_active": 1 if is_active else 0,
        }
        self.workflows[document_type] = workflow
        return workflow

    async def update_workflow(self, name: str, updates: dict[str, Any]) -> RecordPayload:
        self._record("update_workflow", name, updates)
        return {"name": name, **updates}
