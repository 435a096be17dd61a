"""Tool dispatch for the MCP front end.

Maps tool invocations (name + JSON arguments) to ERPNextPort operations
and formats their results as text. Failures surface as ``ToolError``
carrying the exact message the caller should see.
"""

import dataclasses
import json
import logging
import re
from typing import Any
from urllib.parse import unquote

from erpnext_mcp.core.errors import ERPNextError
from erpnext_mcp.core.naming import custom_field_name
from erpnext_mcp.core.ports import ERPNextPort

from .tools import DOCTYPES_RESOURCE_URI, TOOLS_BY_NAME, required_arguments

logger = logging.getLogger(__name__)

AUTHENTICATE_TOOL = "authenticate_erpnext"
NOT_AUTHENTICATED_MESSAGE = (
    "Not authenticated with ERPNext. Configure API key or use authenticate_erpnext."
)

_DOCUMENT_URI = re.compile(r"^erpnext://([^/]+)/(.+)$")


class ToolError(Exception):
    """A failed tool call. The message is shown to the caller verbatim."""


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_success(data: Any, message: str | None = None) -> str:
    """Render a result as pretty JSON, optionally preceded by a summary line."""
    body = json.dumps(data, indent=2, default=_json_default)
    if message:
        return f"{message}\n\n{body}"
    return body


class ToolDispatcher:
    """Executes MCP tool calls against an ERPNextPort."""

    def __init__(self, erpnext: ERPNextPort):
        """Initialize the dispatcher.

        Args:
            erpnext: ERPNextPort implementation that performs the remote calls.
        """
        self.erpnext = erpnext

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Run one tool and return its text result.

        Args:
            name: Tool name as declared in TOOL_DEFINITIONS.
            arguments: Tool arguments (already schema-validated by the protocol layer).

        Returns:
            Text content for a successful call.

        Raises:
            ToolError: If the caller is not authenticated, the tool is unknown,
                a required argument is missing, or the remote call fails.
        """
        args = arguments or {}

        if name != AUTHENTICATE_TOOL and not self.erpnext.is_authenticated():
            raise ToolError(NOT_AUTHENTICATED_MESSAGE)

        if name not in TOOLS_BY_NAME:
            raise ToolError(f"Unknown tool: {name}")

        for argument in required_arguments(name):
            if args.get(argument) is None:
                raise ToolError(f"Missing required argument: {argument}")

        try:
            return await self._dispatch(name, args)
        except ERPNextError as e:
            logger.error(f"Tool {name} failed: {e}")
            raise ToolError(str(e)) from e

    async def _dispatch(self, name: str, args: dict[str, Any]) -> str:
        erpnext = self.erpnext

        if name == AUTHENTICATE_TOOL:
            success = await erpnext.authenticate(args["username"], args["password"])
            if not success:
                raise ToolError("Authentication failed")
            return format_success({"authenticated": True}, "Successfully authenticated")

        elif name == "get_documents":
            limit = args.get("limit")
            return format_success(
                await erpnext.get_doc_list(
                    args["doctype"],
                    filters=args.get("filters"),
                    fields=args.get("fields"),
                    limit=int(limit) if limit else None,
                )
            )

        elif name == "get_document":
            return format_success(await erpnext.get_document(args["doctype"], args["name"]))

        elif name == "create_document":
            result = await erpnext.create_document(args["doctype"], args["data"])
            created_name = (result or {}).get("name")
            return format_success(result, f"Created {args['doctype']}: {created_name}")

        elif name == "update_document":
            result = await erpnext.update_document(args["doctype"], args["name"], args["data"])
            return format_success(result, f"Updated {args['doctype']}: {args['name']}")

        elif name == "delete_document":
            await erpnext.delete_document(args["doctype"], args["name"])
            return format_success({"deleted": True}, f"Deleted {args['doctype']}: {args['name']}")

        elif name == "submit_document":
            result = await erpnext.submit_document(args["doctype"], args["name"])
            return format_success(result, f"Submitted {args['doctype']}: {args['name']}")

        elif name == "cancel_document":
            result = await erpnext.cancel_document(args["doctype"], args["name"])
            return format_success(result, f"Cancelled {args['doctype']}: {args['name']}")

        elif name == "get_doctypes":
            return format_success(await erpnext.get_all_doctypes())

        elif name == "get_doctype_fields":
            return format_success(await erpnext.get_doctype_fields(args["doctype"]))

        elif name == "get_doctype_meta":
            return format_success(await erpnext.get_doctype_meta(args["doctype"]))

        elif name == "create_doctype":
            result = await erpnext.create_doctype(
                args["name"],
                args["module"],
                args["fields"],
                is_submittable=bool(args.get("is_submittable")),
                is_child_table=bool(args.get("is_child_table")),
                autoname=args.get("autoname"),
                title_field=args.get("title_field"),
                permissions=args.get("permissions"),
            )
            return format_success(result, f"Created DocType: {args['name']}")

        elif name == "add_doctype_field":
            reqd = args.get("reqd")
            result = await erpnext.add_custom_field(
                args["doctype"],
                args["fieldname"],
                args["fieldtype"],
                args["label"],
                options=args.get("options"),
                reqd=int(reqd) if reqd is not None else None,
                insert_after=args.get("insert_after"),
                description=args.get("description"),
                default=args.get("default"),
            )
            return format_success(
                result, f"Added field \"{args['fieldname']}\" to {args['doctype']}"
            )

        elif name == "get_workflow":
            workflow = await erpnext.get_workflow(args["doctype"])
            if workflow:
                return format_success(workflow)
            return format_success(
                {"workflow": None}, f"No active workflow for {args['doctype']}"
            )

        elif name == "create_workflow":
            result = await erpnext.create_workflow(
                args["workflow_name"],
                args["document_type"],
                args["states"],
                args["transitions"],
                is_active=args.get("is_active") is not False,
            )
            return format_success(result, f"Created workflow: {args['workflow_name']}")

        elif name == "update_workflow":
            result = await erpnext.update_workflow(args["name"], args["updates"])
            return format_success(result, f"Updated workflow: {args['name']}")

        elif name == "create_custom_field":
            result = await erpnext.add_custom_field(
                args["doctype"],
                args["fieldname"],
                args["fieldtype"],
                args["label"],
                options=args.get("options"),
                insert_after=args.get("insert_after"),
            )
            return format_success(
                result,
                f"Created custom field: {custom_field_name(args['doctype'], args['fieldname'])}",
            )

        elif name == "create_property_setter":
            result = await erpnext.create_property_setter(
                args["doctype"],
                args["property"],
                args["value"],
                fieldname=args.get("fieldname"),
            )
            return format_success(result, f"Created property setter for {args['doctype']}")

        elif name == "run_report":
            return format_success(
                await erpnext.run_report(args["report_name"], args.get("filters"))
            )

        else:
            raise ToolError(f"Unknown tool: {name}")

    async def read_resource(self, uri: str) -> str:
        """Read an ``erpnext://`` resource as JSON text.

        Raises:
            ToolError: If not authenticated, the URI is not recognized,
                or the remote call fails.
        """
        if not self.erpnext.is_authenticated():
            raise ToolError("Not authenticated with ERPNext")

        result: Any = None
        try:
            if uri == DOCTYPES_RESOURCE_URI:
                result = {"doctypes": await self.erpnext.get_all_doctypes()}
            else:
                match = _DOCUMENT_URI.match(uri)
                if match:
                    result = await self.erpnext.get_document(
                        unquote(match.group(1)), unquote(match.group(2))
                    )
        except ERPNextError as e:
            raise ToolError(str(e)) from e

        if not result:
            raise ToolError(f"Invalid URI: {uri}")
        return json.dumps(result, indent=2, default=_json_default)
