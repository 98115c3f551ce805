"""
Schema primitives shared by every managed resource.

Resources declare their attributes with Schema, group them in a Resource
together with lifecycle handlers, and read/write instance values through
ResourceData.
"""

from jujuform.schema.types import (
    ValueType,
    Schema,
    Resource,
    import_state_passthrough,
)
from jujuform.schema.resource_data import ResourceData

__all__ = [
    "ValueType",
    "Schema",
    "Resource",
    "ResourceData",
    "import_state_passthrough",
]
