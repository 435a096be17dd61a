"""ERPNext bridge: exposes ERPNext documents, metadata, and workflows as MCP tools."""

__version__ = "1.0.0"
