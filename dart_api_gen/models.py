"""Synthesize Dart data classes and enums from resolved schemas.

Type derivation is shared by response and request models; what differs is
the FieldPolicy that decides nullability and defaults afterwards.

  string          -> String, or a generated enum when 'enum' is present
  integer         -> int
  number          -> double
  boolean         -> bool
  array           -> List<T>, T derived from 'items'
  object + props  -> nested class {Parent}{Field}, embedded in the parent file
  object          -> Map<String, dynamic>
  anything else   -> dynamic
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from .errors import SchemaCycleError
from .naming import NamingContext, dart_identifier, enum_base_name, field_name, to_pascal_case
from .schema_parser import (
    is_string_enum,
    object_properties,
    primitive_dart_type,
    resolve_schema,
    single_ref_name,
)

PRIMITIVE = "primitive"
LIST = "list"
MAP = "map"
ENUM = "enum"
MODEL = "model"
DYNAMIC = "dynamic"

_PRIMITIVE_DEFAULTS: dict[str, str] = {
    "String": "''",
    "int": "0",
    "double": "0.0",
    "bool": "false",
}

_COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")


@dataclass(frozen=True)
class DartType:
    name: str
    kind: str
    nullable: bool = False

    @property
    def declaration(self) -> str:
        if self.nullable and self.kind != DYNAMIC:
            return f"{self.name}?"
        return self.name


@dataclass(frozen=True)
class FieldSpec:
    json_key: str
    name: str
    type: str
    default: str | None = None
    required: bool = False

    def render(self) -> str:
        """Render as a freezed factory parameter."""
        parts = []
        if self.default is not None:
            parts.append(f"@Default({self.default})")
        parts.append(f"@JsonKey(name: '{self.json_key}')")
        if self.required:
            parts.append("required")
        parts.append(f"{self.type} {self.name}")
        return " ".join(parts)


@dataclass
class ModelClass:
    name: str
    fields: list[FieldSpec]
    nested: list[ModelClass] = field(default_factory=list)

    def all_classes(self) -> Iterator[ModelClass]:
        """This class followed by every embedded class, depth first."""
        yield self
        for child in self.nested:
            yield from child.all_classes()


@dataclass(frozen=True)
class EnumModel:
    name: str
    values: tuple[str, ...]

    @property
    def members(self) -> list[tuple[str, str]]:
        """(identifier, json value) pairs with the 'none' fallback first."""
        values = list(self.values)
        if "none" not in values:
            values.insert(0, "none")
        return [(dart_identifier(v), v) for v in values]


def type_default(dart_type: DartType) -> str | None:
    """Dart expression used as @Default for a non-nullable field."""
    if dart_type.kind == PRIMITIVE:
        return _PRIMITIVE_DEFAULTS.get(dart_type.name)
    if dart_type.kind == LIST:
        return "[]"
    if dart_type.kind == MAP:
        return "{}"
    if dart_type.kind == ENUM:
        return f"{dart_type.name}.none"
    if dart_type.kind == MODEL:
        return f"{dart_type.name}()"
    return None


class FieldPolicy(abc.ABC):
    """Decides how a derived type becomes a field declaration."""

    @abc.abstractmethod
    def build(self, json_key: str, dart_type: DartType, required: bool) -> FieldSpec:
        ...


class ResponseFieldPolicy(FieldPolicy):
    """Every field non-nullable with a type-directed default."""

    def build(self, json_key: str, dart_type: DartType, required: bool) -> FieldSpec:
        return FieldSpec(
            json_key=json_key,
            name=field_name(json_key),
            type=dart_type.name,
            default=type_default(dart_type),
        )


class RequestFieldPolicy(FieldPolicy):
    """Optional or nullable fields are nullable without default.

    Required fields stay non-nullable; primitives and collections get a
    default, everything else becomes a required named parameter.
    """

    def build(self, json_key: str, dart_type: DartType, required: bool) -> FieldSpec:
        name = field_name(json_key)
        if not required or dart_type.nullable:
            return FieldSpec(json_key, name, replace(dart_type, nullable=True).declaration)

        default = None
        if dart_type.kind in (PRIMITIVE, LIST, MAP):
            default = type_default(dart_type)
        return FieldSpec(
            json_key,
            name,
            dart_type.name,
            default=default,
            required=default is None and dart_type.kind != DYNAMIC,
        )


RESPONSE_POLICY = ResponseFieldPolicy()
REQUEST_POLICY = RequestFieldPolicy()


class ModelSynthesizer:
    """Turns schemas into ModelClass and EnumModel definitions.

    Names come from the NamingContext passed in; enums and referenced
    component names accumulate on the instance for the planner to emit.
    """

    def __init__(self, schemas: dict[str, Any], naming: NamingContext) -> None:
        self.schemas = schemas
        self.naming = naming
        self.enums: dict[str, EnumModel] = {}
        self.referenced: dict[str, None] = {}

    def has_fields(self, schema: dict[str, Any]) -> bool:
        shape = object_properties(schema, self.schemas)
        return shape is not None and bool(shape[0])

    def build_class(
        self,
        class_name: str,
        schema: dict[str, Any],
        policy: FieldPolicy,
    ) -> ModelClass | None:
        """Build the class for an object schema, None when it has no fields."""
        shape = object_properties(schema, self.schemas)
        if shape is None or not shape[0]:
            return None

        properties, required = shape
        nested: list[ModelClass] = []
        fields = []
        for json_key, prop_schema in properties.items():
            dart_type = self.derive_type(prop_schema or {}, class_name, json_key, nested, policy)
            fields.append(policy.build(json_key, dart_type, json_key in required))
        return ModelClass(class_name, fields, nested)

    def derive_type(
        self,
        schema: dict[str, Any],
        owner: str,
        field_key: str,
        nested: list[ModelClass],
        policy: FieldPolicy,
        _chain: tuple[str, ...] = (),
    ) -> DartType:
        """Derive the Dart type of one property, creating nested classes as needed."""
        nullable = bool(schema.get("nullable"))

        component = single_ref_name(schema)
        if component is not None:
            if component in _chain:
                raise SchemaCycleError([*_chain, component])
            target = resolve_schema(self.schemas.get(component), self.schemas, (component,))
            if self.has_fields(target):
                self.referenced.setdefault(component, None)
                return DartType(self.naming.schema_class_name(component), MODEL, nullable)
            if is_string_enum(target):
                return DartType(self.component_enum(component, target), ENUM, nullable)
            inner = self.derive_type(
                target, owner, field_key, nested, policy, (*_chain, component)
            )
            return replace(inner, nullable=nullable or inner.nullable)

        schema_type = schema.get("type")

        if is_string_enum(schema):
            return DartType(self.inline_enum(schema["enum"], owner, field_key), ENUM, nullable)

        primitive = primitive_dart_type(schema)
        if primitive is not None:
            return DartType(primitive, PRIMITIVE, nullable)

        if schema_type == "array":
            items = schema.get("items") or {}
            item = self.derive_type(items, owner, f"{field_key}Item", nested, policy, _chain)
            return DartType(f"List<{item.declaration}>", LIST, nullable)

        is_composed = any(key in schema for key in _COMPOSITION_KEYS)
        if schema_type == "object" or is_composed or (schema_type is None and "properties" in schema):
            if self.has_fields(schema):
                class_name = self.naming.register(f"{owner}{to_pascal_case(field_key)}")
                model = self.build_class(class_name, schema, policy)
                nested.append(model)
                return DartType(class_name, MODEL, nullable)
            if schema_type == "object":
                return DartType("Map<String, dynamic>", MAP, nullable)

        return DartType("dynamic", DYNAMIC)

    def inline_enum(self, values: list[Any], owner: str, field_key: str) -> str:
        """Name and record an enum declared inline on a field.

        The field-derived name is used while it is free or already holds the
        same values; otherwise the owning class name is prefixed.
        """
        enum_values = tuple(str(v) for v in values)
        base = enum_base_name(field_key)

        existing = self.enums.get(base)
        if existing is not None and existing.values == enum_values:
            return base
        if existing is None and base not in self.naming:
            self.enums[base] = EnumModel(self.naming.claim(base), enum_values)
            return base

        name = self.naming.register(f"{owner}{base}")
        self.enums[name] = EnumModel(name, enum_values)
        return name

    def component_enum(self, component: str, schema: dict[str, Any]) -> str:
        name = self.naming.schema_class_name(component)
        if name not in self.enums:
            self.enums[name] = EnumModel(name, tuple(str(v) for v in schema["enum"]))
        return name
