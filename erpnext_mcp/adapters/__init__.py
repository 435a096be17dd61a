"""External adapters for the ERPNext bridge.

This package contains all external dependencies (HTTP transport, the MCP
SDK) and provides implementations of, or callers into, the core port.

Adapter Organization:

- erpnext/: ERPNextPort implementation over the Frappe REST API
- mcp/: MCP protocol front end (tool declarations, dispatch, stdio server)
"""
