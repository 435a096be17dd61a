"""End-to-end tool flows: dispatcher, REST adapter, and a fake ERPNext site.

Each test drives the bridge the way an MCP client would, by tool name
and JSON arguments, and checks the text that comes back.
"""

import json

import pytest

from erpnext_mcp.adapters.erpnext.client import ERPNextClient
from erpnext_mcp.adapters.mcp.dispatcher import NOT_AUTHENTICATED_MESSAGE, ToolDispatcher, ToolError
from erpnext_mcp.core.models import ConnectionConfig
from erpnext_mcp.tests.fakes.remote import FakeERPNextServer


@pytest.fixture
def remote() -> FakeERPNextServer:
    return FakeERPNextServer()


@pytest.fixture
def dispatcher(remote: FakeERPNextServer) -> ToolDispatcher:
    config = ConnectionConfig("https://erp.example.com", api_key="key", api_secret="secret")
    return ToolDispatcher(ERPNextClient(config, transport=remote.transport()))


@pytest.mark.asyncio
class TestDocumentLifecycle:
    async def test_create_then_fetch(self, dispatcher: ToolDispatcher) -> None:
        created = await dispatcher.call_tool(
            "create_document",
            {"doctype": "Customer", "data": {"name": "ACME", "customer_name": "ACME Corp"}},
        )
        assert created.startswith("Created Customer: ACME\n\n")

        fetched = json.loads(
            await dispatcher.call_tool("get_document", {"doctype": "Customer", "name": "ACME"})
        )
        assert fetched["customer_name"] == "ACME Corp"

        listed = json.loads(await dispatcher.call_tool("get_documents", {"doctype": "Customer"}))
        assert listed == [{"name": "ACME"}]

    async def test_submit_twice_names_the_reason(
        self, dispatcher: ToolDispatcher, remote: FakeERPNextServer
    ) -> None:
        remote.add_document("Sales Invoice", {"name": "SINV-0001"})

        first = await dispatcher.call_tool(
            "submit_document", {"doctype": "Sales Invoice", "name": "SINV-0001"}
        )
        assert first.startswith("Submitted Sales Invoice: SINV-0001")

        with pytest.raises(ToolError) as exc_info:
            await dispatcher.call_tool(
                "submit_document", {"doctype": "Sales Invoice", "name": "SINV-0001"}
            )

        assert str(exc_info.value) == (
            'Failed to submit Sales Invoice "SINV-0001" (HTTP 417): '
            "Cannot change docstatus from 1 to 1"
        )

    async def test_validation_failure_surfaces_remote_message(
        self, dispatcher: ToolDispatcher
    ) -> None:
        with pytest.raises(ToolError) as exc_info:
            await dispatcher.call_tool(
                "create_document", {"doctype": "Customer", "data": {"customer_group": "Retail"}}
            )

        assert "Value missing for Customer: Customer Name" in str(exc_info.value)

    async def test_document_resource(
        self, dispatcher: ToolDispatcher, remote: FakeERPNextServer
    ) -> None:
        remote.add_document("Sales Invoice", {"name": "SINV-0001", "grand_total": 250})

        text = await dispatcher.read_resource("erpnext://Sales%20Invoice/SINV-0001")

        assert json.loads(text)["grand_total"] == 250


@pytest.mark.asyncio
class TestSessionLogin:
    @pytest.fixture
    def dispatcher(self, remote: FakeERPNextServer) -> ToolDispatcher:
        config = ConnectionConfig("https://erp.example.com")
        return ToolDispatcher(ERPNextClient(config, transport=remote.transport()))

    async def test_tools_locked_until_login(self, dispatcher: ToolDispatcher) -> None:
        with pytest.raises(ToolError) as exc_info:
            await dispatcher.call_tool("get_doctypes", {})
        assert str(exc_info.value) == NOT_AUTHENTICATED_MESSAGE

        await dispatcher.call_tool(
            "authenticate_erpnext", {"username": "admin", "password": "secret"}
        )

        assert json.loads(await dispatcher.call_tool("get_doctypes", {})) == []

    async def test_bad_password_reports_remote_reason(self, dispatcher: ToolDispatcher) -> None:
        with pytest.raises(ToolError) as exc_info:
            await dispatcher.call_tool(
                "authenticate_erpnext", {"username": "admin", "password": "nope"}
            )

        assert str(exc_info.value) == "Authentication failed (HTTP 401): Invalid login credentials"


@pytest.mark.asyncio
class TestCustomization:
    async def test_custom_field_then_property_setter(
        self, dispatcher: ToolDispatcher, remote: FakeERPNextServer
    ) -> None:
        created = await dispatcher.call_tool(
            "create_custom_field",
            {
                "doctype": "Customer",
                "fieldname": "loyalty_tier",
                "fieldtype": "Select",
                "label": "Loyalty Tier",
                "options": "Gold\nSilver",
            },
        )
        assert created.startswith("Created custom field: Customer-loyalty_tier")

        await dispatcher.call_tool(
            "create_property_setter",
            {"doctype": "Customer", "property": "reqd", "value": "1", "fieldname": "loyalty_tier"},
        )

        assert "Customer-loyalty_tier" in remote.documents["Custom Field"]
        assert "Customer-loyalty_tier-reqd" in remote.documents["Property Setter"]

    async def test_workflow_round_trip(self, dispatcher: ToolDispatcher) -> None:
        await dispatcher.call_tool(
            "create_workflow",
            {
                "workflow_name": "PO Approval",
                "document_type": "Purchase Order",
                "states": [
                    {"state": "Draft", "doc_status": "0"},
                    {"state": "Approved", "doc_status": "1"},
                ],
                "transitions": [
                    {
                        "state": "Draft",
                        "action": "Approve",
                        "next_state": "Approved",
                        "allowed": "Purchase Manager",
                    }
                ],
            },
        )

        workflow = json.loads(
            await dispatcher.call_tool("get_workflow", {"doctype": "Purchase Order"})
        )

        assert workflow["workflow_name"] == "PO Approval"
        assert [s["state"] for s in workflow["states"]] == ["Draft", "Approved"]
