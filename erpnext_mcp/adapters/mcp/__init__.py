"""MCP front end.

- tools: JSON-schema declarations of tools and resources
- dispatcher: maps tool calls onto ERPNextPort and formats results
- server: low-level MCP server wiring and stdio runner
"""
