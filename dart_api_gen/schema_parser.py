"""Dereference and inspect OpenAPI schema fragments.

Handles:
- $ref resolution against components.schemas (chains followed, cycles rejected)
- allOf/oneOf/anyOf property merging
- Collecting the component names a schema depends on
- Shape checks used to pick generated return types
"""

from __future__ import annotations

from typing import Any

from .errors import SchemaCycleError
from .loader import ref_name

_COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")

_PRIMITIVE_DART_TYPES: dict[str, str] = {
    "string": "String",
    "integer": "int",
    "number": "double",
    "boolean": "bool",
}


def resolve_schema(
    schema: dict[str, Any] | None,
    schemas: dict[str, Any],
    _chain: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Follow a top-level $ref chain and return the schema it lands on.

    Only the outermost pointer is substituted; refs nested in properties or
    items are left in place so they can become named types. Unknown component
    names resolve to an empty schema.
    """
    if not schema:
        return {}

    name = ref_name(schema.get("$ref"))
    if name is None:
        return schema

    if name in _chain:
        raise SchemaCycleError([*_chain, name])

    target = schemas.get(name)
    if not isinstance(target, dict):
        return {}
    return resolve_schema(target, schemas, (*_chain, name))


def dedupe(values: list[str]) -> list[str]:
    """Drop repeated entries, keeping the first occurrence."""
    return list(dict.fromkeys(values))


def merge_composition(
    schema: dict[str, Any],
    schemas: dict[str, Any],
    _chain: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Flatten allOf/oneOf/anyOf branches into one object schema.

    Properties from all branches are unioned (later branches win). Required
    names only come from allOf branches and the schema itself, since a oneOf
    branch is not guaranteed to apply.
    """
    if not any(key in schema for key in _COMPOSITION_KEYS):
        return schema

    properties: dict[str, Any] = dict(schema.get("properties") or {})
    required: list[str] = list(schema.get("required") or [])

    for key in _COMPOSITION_KEYS:
        for branch in schema.get(key) or []:
            name = ref_name(branch.get("$ref"))
            chain = _chain if name is None else (*_chain, name)
            resolved = merge_composition(
                resolve_schema(branch, schemas, _chain), schemas, chain
            )
            properties.update(resolved.get("properties") or {})
            if key == "allOf":
                required.extend(resolved.get("required") or [])

    merged: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        merged["required"] = dedupe(required)
    if schema.get("nullable"):
        merged["nullable"] = True
    return merged


def object_properties(
    schema: dict[str, Any],
    schemas: dict[str, Any],
) -> tuple[dict[str, Any], list[str]] | None:
    """Return (properties, required) for an object-like schema, else None."""
    effective = merge_composition(schema, schemas)
    properties = effective.get("properties")
    if not isinstance(properties, dict):
        return None
    if effective.get("type") not in (None, "object"):
        return None
    return properties, dedupe(list(effective.get("required") or []))


def extract_ref_name(schema: dict[str, Any] | None) -> str | None:
    """Return the component name a schema points at, looking into compositions."""
    if not schema:
        return None

    name = ref_name(schema.get("$ref"))
    if name is not None:
        return name

    for key in _COMPOSITION_KEYS:
        for branch in schema.get(key) or []:
            name = extract_ref_name(branch)
            if name is not None:
                return name
    return None


def single_ref_name(schema: dict[str, Any] | None) -> str | None:
    """Component name when schema is only a pointer to it.

    A one-branch composition without sibling properties counts, since
    OpenAPI 3.0 documents use {"allOf": [{"$ref": ...}], "nullable": true}
    to mark a reference nullable.
    """
    if not schema:
        return None

    name = ref_name(schema.get("$ref"))
    if name is not None:
        return name
    if schema.get("properties"):
        return None

    branches = [branch for key in _COMPOSITION_KEYS for branch in schema.get(key) or []]
    if len(branches) != 1 or not isinstance(branches[0], dict):
        return None
    return ref_name(branches[0].get("$ref"))


def collect_ref_names(schema: Any, out: dict[str, None]) -> None:
    """Add every component referenced by schema to out (an ordered set)."""
    if not isinstance(schema, dict):
        return

    name = ref_name(schema.get("$ref"))
    if name is not None:
        out.setdefault(name, None)

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for prop in properties.values():
            collect_ref_names(prop, out)

    items = schema.get("items")
    if isinstance(items, dict):
        collect_ref_names(items, out)

    for key in _COMPOSITION_KEYS:
        for branch in schema.get(key) or []:
            collect_ref_names(branch, out)


def collect_transitive_ref_names(
    roots: dict[str, None],
    schemas: dict[str, Any],
) -> dict[str, None]:
    """Expand a set of component names with everything they depend on."""
    names = dict(roots)
    pending = list(names)
    while pending:
        component = schemas.get(pending.pop(0))
        if not isinstance(component, dict):
            continue
        found: dict[str, None] = {}
        collect_ref_names(component, found)
        for name in found:
            if name not in names:
                names[name] = None
                pending.append(name)
    return names


def primitive_dart_type(schema: dict[str, Any]) -> str | None:
    """Map a primitive JSON type to its Dart type, None for anything else."""
    return _PRIMITIVE_DART_TYPES.get(schema.get("type"))


def is_array_schema(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "array" or "items" in schema


def is_string_enum(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "string" and bool(schema.get("enum"))


def is_void_schema(schema: dict[str, Any] | None, schemas: dict[str, Any]) -> bool:
    """Whether a wrapped payload carries nothing worth decoding.

    Explicitly nullable payloads, untyped payloads and objects without
    properties all count as void.
    """
    if not schema:
        return True
    if schema.get("nullable") is True:
        return True

    if any(key in schema for key in _COMPOSITION_KEYS):
        merged = merge_composition(schema, schemas)
        return not merged.get("properties")

    schema_type = schema.get("type")
    if schema_type is None:
        return "items" not in schema
    if schema_type == "object":
        return not schema.get("properties")
    return False
