"""Tool and resource declarations exposed over MCP.

Each tool is declared with a JSON schema for its arguments. The schemas
are the only argument validation performed before calls reach the
ERPNext adapter.
"""

from typing import Any

DOCTYPES_RESOURCE_URI = "erpnext://DocTypes"
DOCUMENT_RESOURCE_TEMPLATE = "erpnext://{doctype}/{name}"

_DOCTYPE = {"type": "string", "description": "ERPNext DocType"}
_NAME = {"type": "string", "description": "Document name/ID"}


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _tool(name: str, description: str, input_schema: dict[str, Any]) -> dict[str, Any]:
    return {"name": name, "description": description, "inputSchema": input_schema}


_DOCTYPE_FIELD_ITEM = _schema(
    {
        "fieldname": {"type": "string"},
        "fieldtype": {"type": "string"},
        "label": {"type": "string"},
        "options": {"type": "string"},
        "reqd": {"type": "number"},
        "in_list_view": {"type": "number"},
        "default": {"type": "string"},
        "description": {"type": "string"},
    },
    ["fieldname", "fieldtype", "label"],
)

_WORKFLOW_STATE_ITEM = _schema(
    {
        "state": {"type": "string"},
        "doc_status": {"type": "string"},
        "allow_edit": {"type": "string"},
        "style": {"type": "string"},
    },
    ["state", "doc_status"],
)

_WORKFLOW_TRANSITION_ITEM = _schema(
    {
        "state": {"type": "string"},
        "action": {"type": "string"},
        "next_state": {"type": "string"},
        "allowed": {"type": "string"},
        "condition": {"type": "string"},
    },
    ["state", "action", "next_state", "allowed"],
)

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    _tool(
        "authenticate_erpnext",
        "Authenticate with ERPNext using username and password.",
        _schema(
            {
                "username": {"type": "string", "description": "ERPNext username"},
                "password": {"type": "string", "description": "ERPNext password"},
            },
            ["username", "password"],
        ),
    ),
    _tool(
        "get_documents",
        "Get a list of documents for a specific DocType with optional filtering.",
        _schema(
            {
                "doctype": _DOCTYPE,
                "fields": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Fields to include",
                },
                "filters": {"type": "object", "description": "Filter conditions"},
                "limit": {"type": "number", "description": "Max documents"},
            },
            ["doctype"],
        ),
    ),
    _tool(
        "get_document",
        "Get a single document by DocType and name.",
        _schema({"doctype": _DOCTYPE, "name": _NAME}, ["doctype", "name"]),
    ),
    _tool(
        "create_document",
        "Create a new document in ERPNext.",
        _schema(
            {"doctype": _DOCTYPE, "data": {"type": "object", "description": "Document data"}},
            ["doctype", "data"],
        ),
    ),
    _tool(
        "update_document",
        "Update an existing document in ERPNext.",
        _schema(
            {
                "doctype": _DOCTYPE,
                "name": _NAME,
                "data": {"type": "object", "description": "Fields to update"},
            },
            ["doctype", "name", "data"],
        ),
    ),
    _tool(
        "delete_document",
        "Delete a document from ERPNext.",
        _schema({"doctype": _DOCTYPE, "name": _NAME}, ["doctype", "name"]),
    ),
    _tool(
        "submit_document",
        "Submit a document (Draft -> Submitted).",
        _schema({"doctype": _DOCTYPE, "name": _NAME}, ["doctype", "name"]),
    ),
    _tool(
        "cancel_document",
        "Cancel a submitted document.",
        _schema({"doctype": _DOCTYPE, "name": _NAME}, ["doctype", "name"]),
    ),
    _tool(
        "get_doctypes",
        "Get a list of all available DocTypes.",
        _schema({}),
    ),
    _tool(
        "get_doctype_fields",
        "Get field definitions for a DocType.",
        _schema({"doctype": _DOCTYPE}, ["doctype"]),
    ),
    _tool(
        "get_doctype_meta",
        "Get complete DocType metadata.",
        _schema({"doctype": _DOCTYPE}, ["doctype"]),
    ),
    _tool(
        "create_doctype",
        "Create a new DocType.",
        _schema(
            {
                "name": {"type": "string", "description": "DocType name"},
                "module": {"type": "string", "description": "Module"},
                "fields": {
                    "type": "array",
                    "items": _DOCTYPE_FIELD_ITEM,
                    "description": "Field definitions",
                },
                "is_submittable": {"type": "boolean"},
                "is_child_table": {"type": "boolean"},
                "autoname": {"type": "string"},
                "title_field": {"type": "string"},
                "permissions": {"type": "array", "items": {"type": "object"}},
            },
            ["name", "module", "fields"],
        ),
    ),
    _tool(
        "add_doctype_field",
        "Add a custom field to a DocType.",
        _schema(
            {
                "doctype": {"type": "string", "description": "Target DocType"},
                "fieldname": {"type": "string", "description": "Field name"},
                "fieldtype": {"type": "string", "description": "Field type"},
                "label": {"type": "string", "description": "Label"},
                "options": {"type": "string", "description": "Options"},
                "reqd": {"type": "number", "description": "Required (0/1)"},
                "insert_after": {"type": "string", "description": "Insert after field"},
                "description": {"type": "string", "description": "Help text"},
                "default": {"type": "string", "description": "Default value"},
            },
            ["doctype", "fieldname", "fieldtype", "label"],
        ),
    ),
    _tool(
        "get_workflow",
        "Get active workflow for a DocType.",
        _schema({"doctype": {"type": "string", "description": "DocType"}}, ["doctype"]),
    ),
    _tool(
        "create_workflow",
        "Create a new workflow.",
        _schema(
            {
                "workflow_name": {"type": "string", "description": "Workflow name"},
                "document_type": {"type": "string", "description": "DocType"},
                "states": {"type": "array", "items": _WORKFLOW_STATE_ITEM},
                "transitions": {"type": "array", "items": _WORKFLOW_TRANSITION_ITEM},
                "is_active": {"type": "boolean"},
            },
            ["workflow_name", "document_type", "states", "transitions"],
        ),
    ),
    _tool(
        "update_workflow",
        "Update an existing workflow.",
        _schema(
            {
                "name": {"type": "string", "description": "Workflow name"},
                "updates": {"type": "object", "description": "Properties to update"},
            },
            ["name", "updates"],
        ),
    ),
    _tool(
        "create_custom_field",
        "Create a custom field (survives updates).",
        _schema(
            {
                "doctype": {"type": "string", "description": "Target DocType"},
                "fieldname": {"type": "string", "description": "Field name"},
                "fieldtype": {"type": "string", "description": "Field type"},
                "label": {"type": "string", "description": "Label"},
                "options": {"type": "string", "description": "Options"},
                "insert_after": {"type": "string", "description": "Insert after"},
            },
            ["doctype", "fieldname", "fieldtype", "label"],
        ),
    ),
    _tool(
        "create_property_setter",
        "Override DocType/field property.",
        _schema(
            {
                "doctype": {"type": "string", "description": "Target DocType"},
                "property": {"type": "string", "description": "Property"},
                "value": {"type": "string", "description": "New value"},
                "fieldname": {"type": "string", "description": "Target field"},
            },
            ["doctype", "property", "value"],
        ),
    ),
    _tool(
        "run_report",
        "Run an ERPNext report.",
        _schema(
            {
                "report_name": {"type": "string", "description": "Report name"},
                "filters": {"type": "object", "description": "Filters"},
            },
            ["report_name"],
        ),
    ),
]

TOOLS_BY_NAME: dict[str, dict[str, Any]] = {tool["name"]: tool for tool in TOOL_DEFINITIONS}

RESOURCE_DEFINITIONS: list[dict[str, Any]] = [
    {
        "uri": DOCTYPES_RESOURCE_URI,
        "name": "All DocTypes",
        "mimeType": "application/json",
        "description": "List of all available DocTypes",
    }
]

RESOURCE_TEMPLATE_DEFINITIONS: list[dict[str, Any]] = [
    {
        "uriTemplate": DOCUMENT_RESOURCE_TEMPLATE,
        "name": "ERPNext Document",
        "mimeType": "application/json",
        "description": "Fetch document by doctype and name",
    }
]


def required_arguments(tool_name: str) -> list[str]:
    """Return the required argument names declared for a tool."""
    tool = TOOLS_BY_NAME.get(tool_name)
    if tool is None:
        return []
    return list(tool["inputSchema"].get("required", []))
