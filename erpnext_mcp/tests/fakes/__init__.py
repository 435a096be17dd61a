"""Fake implementations for testing.

- FakeERPNextPort: In-memory ERPNextPort used by front-end tests
- FakeERPNextServer: In-memory Frappe REST API for adapter tests
"""

from .erpnext import FakeERPNextPort
from .remote import FakeERPNextServer, server_messages

__all__ = [
    "FakeERPNextPort",
    "FakeERPNextServer",
    "server_messages",
]
