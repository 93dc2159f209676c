"""Schema access for querytutor."""

from querytutor.schema.context import SchemaContextBuilder, format_row
from querytutor.schema.provider import SchemaProvider

__all__ = [
    "SchemaContextBuilder",
    "SchemaProvider",
    "format_row",
]
