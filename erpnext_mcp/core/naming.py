"""Deterministic document names for customization records.

Custom Fields and Property Setters are created with explicit names so the
same (DocType, field, property) always maps to the same remote record.
Creating one twice is a naming collision on the remote side, not a
silent update.
"""


def custom_field_name(doctype: str, fieldname: str) -> str:
    """Name of the Custom Field adding ``fieldname`` to ``doctype``."""
    return f"{doctype}-{fieldname}"


def property_setter_name(doctype: str, property_name: str, fieldname: str | None = None) -> str:
    """Name of the Property Setter overriding ``property_name``.

    Field-level overrides embed the field name; DocType-level overrides
    use the ``main`` placeholder instead.
    """
    target = fieldname if fieldname else "main"
    return f"{doctype}-{target}-{property_name}"
