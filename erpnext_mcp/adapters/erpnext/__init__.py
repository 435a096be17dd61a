"""ERPNext REST adapter implementing ERPNextPort."""

from .client import ERPNextClient

__all__ = ["ERPNextClient"]
