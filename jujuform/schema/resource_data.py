"""
ResourceData: the lifecycle handlers' view of one resource instance.

Holds three layers of values for every attribute:
- prior state, as last persisted by the engine
- planned values from configuration (create/update only)
- values written by the handler during this operation

Reads resolve written > planned > prior state > default > zero value.
"""

import json
from typing import Any

from jujuform.errors import SchemaError
from jujuform.schema.types import Resource, Schema, ValueType, zero_value


class ResourceData:
    """
    Attribute access for a single resource instance.

    Example:
        d = resource_cloud().data(plan={"name": "lxd", "type": "lxd"})
        d.get("name")            # "lxd"
        d.get("endpoint")        # ""
        d.set("endpoint", "https://10.0.0.1:8443")
    """

    def __init__(
        self,
        schema: dict[str, Schema],
        state: dict[str, Any] | None = None,
        plan: dict[str, Any] | None = None,
        id: str = "",
    ):
        self._schema = schema
        self._state = dict(state or {})
        self._plan = dict(plan) if plan is not None else None
        self._written: dict[str, Any] = {}
        self._id = id or self._state.pop("id", "") or ""
        self._state.pop("id", None)

    def id(self) -> str:
        return self._id

    def set_id(self, id: str) -> None:
        """Set the resource id. An empty id marks the resource as gone."""
        self._id = id

    def get(self, key: str) -> Any:
        """Current value of an attribute, normalized to its schema type."""
        attr = self._attr(key)
        if key in self._written:
            return _normalize(attr, self._written[key])
        return self._planned(key, attr)

    def set(self, key: str, value: Any) -> None:
        """
        Write an attribute value.

        Raises:
            SchemaError: If the key is unknown or the value does not fit the schema
        """
        attr = self._attr(key)
        self._written[key] = _coerce(attr, value, key)

    def has_change(self, key: str) -> bool:
        """True when the planned value differs from prior state."""
        attr = self._attr(key)
        if self._plan is None:
            return False
        old = _normalize(attr, self._state.get(key))
        return old != self._planned(key, attr)

    def changed_force_new(self) -> list[str]:
        """Force-new attributes whose planned value differs from prior state."""
        return [
            key
            for key, attr in self._schema.items()
            if attr.force_new and self.has_change(key)
        ]

    def state(self) -> dict[str, Any]:
        """Snapshot of every attribute plus the id, suitable for persisting."""
        snapshot = {"id": self._id}
        for key in self._schema:
            snapshot[key] = self.get(key)
        return snapshot

    def _planned(self, key: str, attr: Schema) -> Any:
        if self._plan is not None and (key in self._plan or not attr.computed):
            return _normalize(attr, self._plan.get(key))
        return _normalize(attr, self._state.get(key))

    def _attr(self, key: str) -> Schema:
        try:
            return self._schema[key]
        except KeyError:
            raise SchemaError(f"invalid attribute {key!r}") from None

    def __repr__(self) -> str:
        return f"ResourceData(id='{self._id}')"


def _normalize(attr: Schema, value: Any) -> Any:
    """Fill in zero values and give sets a canonical order."""
    if value is None:
        return attr.zero()

    if attr.type == ValueType.LIST:
        return [_normalize_elem(attr, v) for v in value]
    if attr.type == ValueType.SET:
        return _canonical_set(_normalize_elem(attr, v) for v in value)
    if attr.type == ValueType.MAP:
        return dict(value)
    return value


def _normalize_elem(attr: Schema, value: Any) -> Any:
    if not attr.is_block:
        return value
    nested: Resource = attr.elem
    return {k: _normalize(s, value.get(k)) for k, s in nested.schema.items()}


def _canonical_set(items) -> list:
    unique: dict[str, Any] = {}
    for item in items:
        unique.setdefault(json.dumps(item, sort_keys=True), item)
    return [unique[k] for k in sorted(unique)]


_SCALAR_TYPES = {
    ValueType.STRING: (str,),
    ValueType.BOOL: (bool,),
    ValueType.INT: (int,),
}


def _coerce(attr: Schema, value: Any, path: str) -> Any:
    """Validate a value against its schema, returning a storable copy."""
    if value is None:
        return None

    if attr.type in _SCALAR_TYPES:
        return _coerce_scalar(attr.type, value, path)

    if attr.type in (ValueType.LIST, ValueType.SET):
        if isinstance(value, (str, bytes, dict)) or not hasattr(value, "__iter__"):
            raise SchemaError(
                f"{path}: expected {attr.type.value}, got {type(value).__name__}"
            )
        return [_coerce_elem(attr, v, f"{path}.{i}") for i, v in enumerate(value)]

    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected map, got {type(value).__name__}")
    elem_type = attr.elem.type if attr.elem is not None else ValueType.STRING
    return {
        str(k): _weak_scalar(elem_type, v, f"{path}.{k}") for k, v in value.items()
    }


def _coerce_elem(attr: Schema, value: Any, path: str) -> Any:
    if not attr.is_block:
        return _coerce(attr.elem, value, path)

    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object, got {type(value).__name__}")
    nested: Resource = attr.elem
    coerced = {}
    for k, v in value.items():
        if k not in nested.schema:
            raise SchemaError(f"{path}: invalid attribute {k!r}")
        coerced[k] = _coerce(nested.schema[k], v, f"{path}.{k}")
    return coerced


def _coerce_scalar(value_type: ValueType, value: Any, path: str) -> Any:
    expected = _SCALAR_TYPES[value_type]
    # bool is an int subclass; keep them apart
    if isinstance(value, bool) and value_type == ValueType.INT:
        raise SchemaError(f"{path}: expected int, got bool")
    if not isinstance(value, expected):
        raise SchemaError(
            f"{path}: expected {value_type.value}, got {type(value).__name__}"
        )
    return value


def _weak_scalar(value_type: ValueType, value: Any, path: str) -> Any:
    """Map values decode weakly: 8443 and True are accepted for strings."""
    if value_type == ValueType.STRING and not isinstance(value, str):
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
    if value is None:
        return zero_value(value_type)
    return _coerce_scalar(value_type, value, path)
