"""Test suite for the ERPNext bridge.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - No I/O, fast execution
   - Error normalization, naming, models

2. adapters/: Tests for adapter implementations
   - ERPNextClient against an in-memory ERPNext (httpx.MockTransport)
   - Tool dispatch and MCP server wiring against FakeERPNextPort

3. fakes/: Test doubles
   - FakeERPNextPort: in-memory ERPNextPort
   - FakeERPNextServer: in-memory Frappe REST API
"""
