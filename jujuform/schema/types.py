"""
Attribute schema definitions.

A Resource describes one kind of managed object: its attributes and the
lifecycle handlers that translate them into controller API calls.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

from jujuform.errors import SchemaError

if TYPE_CHECKING:
    from jujuform.diag import Diagnostics
    from jujuform.schema.resource_data import ResourceData


class ValueType(str, Enum):
    """Value types an attribute can hold."""
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    LIST = "list"
    SET = "set"
    MAP = "map"


LifecycleFunc = Callable[["ResourceData", Any], "Diagnostics"]
ImporterFunc = Callable[["ResourceData", Any], list["ResourceData"]]


@dataclass
class Schema:
    """
    Definition of a single attribute.

    Example:
        Schema(
            type=ValueType.LIST,
            description="The authentication modes supported by the cloud",
            elem=Schema(type=ValueType.STRING),
            required=True,
        )
    """

    type: ValueType
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False
    """Changing the value requires destroying and recreating the object"""

    default: Any = None
    elem: "Schema | Resource | None" = None
    """Element schema for lists, sets and maps; a Resource for nested blocks"""

    def __post_init__(self):
        if self.required and (self.optional or self.computed):
            raise SchemaError("required attributes cannot be optional or computed")
        if self.required and self.default is not None:
            raise SchemaError("required attributes cannot have a default")
        if self.type in (ValueType.LIST, ValueType.SET) and self.elem is None:
            raise SchemaError(f"{self.type.value} attributes need an elem schema")
        if self.type == ValueType.MAP and isinstance(self.elem, Resource):
            raise SchemaError("map elements must be scalar")

    @property
    def is_block(self) -> bool:
        """True when elements are nested objects rather than scalars."""
        return isinstance(self.elem, Resource)

    def zero(self) -> Any:
        """Value reported for an attribute that was never set."""
        if self.default is not None:
            if isinstance(self.default, (list, dict)):
                return type(self.default)(self.default)
            return self.default
        return zero_value(self.type)


def zero_value(value_type: ValueType) -> Any:
    if value_type == ValueType.STRING:
        return ""
    if value_type == ValueType.BOOL:
        return False
    if value_type == ValueType.INT:
        return 0
    if value_type == ValueType.MAP:
        return {}
    return []


@dataclass
class Resource:
    """
    A managed object type: attribute schema plus lifecycle handlers.

    Handlers take (ResourceData, meta) where meta is whatever the
    provider's configure step returned, and return Diagnostics.
    """

    schema: dict[str, Schema]
    description: str = ""
    create: LifecycleFunc | None = None
    read: LifecycleFunc | None = None
    update: LifecycleFunc | None = None
    delete: LifecycleFunc | None = None
    importer: ImporterFunc | None = None

    def data(
        self,
        state: dict[str, Any] | None = None,
        plan: dict[str, Any] | None = None,
        id: str = "",
    ) -> "ResourceData":
        """
        Build a ResourceData view over this schema.

        Args:
            state: Prior state (as returned by ResourceData.state())
            plan: Planned attribute values from configuration
            id: Resource id; taken from state["id"] when omitted
        """
        from jujuform.schema.resource_data import ResourceData

        return ResourceData(self.schema, state=state, plan=plan, id=id)

    def import_state(self, id: str, meta: Any) -> tuple[list["ResourceData"], "Diagnostics"]:
        """
        Import an existing object by id and refresh it.

        Returns:
            (imported ResourceData list, diagnostics from the refresh)
        """
        from jujuform.diag import Diagnostics

        if self.importer is None:
            return [], Diagnostics.errorf("resource does not support import")

        imported = self.importer(self.data(id=id), meta)
        diags = Diagnostics()
        for d in imported:
            diags.extend(self.read(d, meta))
        return imported, diags


def import_state_passthrough(d: "ResourceData", meta: Any) -> list["ResourceData"]:
    """Importer that keeps the supplied id and leaves the rest to read."""
    return [d]
