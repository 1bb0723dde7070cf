"""Decide every generated type name and file before anything is written.

The plan is computed once per run and shared by the method emitter and the
model/enum emitters, so a method's return type always names a class that
is actually generated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .endpoints import EndpointInfo
from .models import (
    ENUM,
    MODEL,
    PRIMITIVE,
    REQUEST_POLICY,
    RESPONSE_POLICY,
    EnumModel,
    FieldPolicy,
    ModelClass,
    ModelSynthesizer,
)
from .naming import (
    NamingContext,
    array_item_model_base,
    build_method_name,
    clean_path_for_name,
    normalize_schema_name,
    request_model_base,
)
from .schema_parser import (
    collect_ref_names,
    collect_transitive_ref_names,
    is_array_schema,
    is_string_enum,
    is_void_schema,
    primitive_dart_type,
    resolve_schema,
    single_ref_name,
)

AUTH_CLIENT = "_authAppServerApiClient"
NONE_AUTH_CLIENT = "_noneAuthAppServerApiClient"

# Response shapes
VOID = "void"
PRIMITIVE_LIST = "primitive_list"
MODEL_LIST = "model_list"
ENUM_LIST = "enum_list"
PRIMITIVE_OBJECT = "primitive"
MODEL_OBJECT = "model"

# Output directories a model file can go to
RESPONSE = "response"
REQUEST = "request"

_PRIMITIVE_FALLBACKS: dict[str, str] = {
    "String": " ?? ''",
    "int": " ?? 0",
    "double": " ?? 0.0",
    "bool": " ?? false",
}

_MAP_TYPE = "Map<String, dynamic>"


@dataclass(frozen=True)
class ResponseShape:
    kind: str
    type_name: str = "void"

    @property
    def is_list(self) -> bool:
        return self.kind in (PRIMITIVE_LIST, MODEL_LIST, ENUM_LIST)

    @property
    def return_type(self) -> str:
        wrapper = "DataListResponse" if self.is_list else "DataResponse"
        return f"Future<{wrapper}<{self.type_name}>?>"

    @property
    def decoder_type(self) -> str:
        if self.is_list:
            return "SuccessResponseDecoderType.dataJsonArray"
        return "SuccessResponseDecoderType.dataJsonObject"

    @property
    def decoder(self) -> str:
        if self.kind == VOID:
            return "(_) => Object()"
        if self.kind in (MODEL_LIST, MODEL_OBJECT):
            return (
                f"(json) => {self.type_name}.fromJson("
                f"json.safeCast<{_MAP_TYPE}>() ?? {{}})"
            )
        if self.kind == ENUM_LIST:
            # Members are looked up by identifier, unknown values map to none
            return (
                f"(json) => {self.type_name}.values.asNameMap()"
                f"[json.safeCast<String>()] ?? {self.type_name}.none"
            )
        fallback = _PRIMITIVE_FALLBACKS.get(self.type_name, "")
        return f"(json) => json.safeCast<{self.type_name}>(){fallback}"


@dataclass(frozen=True)
class RequestBody:
    """The single structured 'request' parameter of a method."""

    type_name: str
    body_argument: str


@dataclass(frozen=True)
class EndpointPlan:
    endpoint: EndpointInfo
    method_name: str
    client: str
    response: ResponseShape
    request: RequestBody | None


@dataclass(frozen=True)
class ModelFile:
    model: ModelClass
    kind: str


@dataclass
class GenerationPlan:
    endpoints: list[EndpointPlan]
    models: list[ModelFile]
    enums: list[EnumModel]


def client_for(endpoint: EndpointInfo) -> str:
    """Login calls go through the unauthenticated client, everything else is authed."""
    if endpoint.method == "POST" and "/auth/" in endpoint.path and "/login" in endpoint.path:
        return NONE_AUTH_CLIENT
    return AUTH_CLIENT


def _is_response_component(name: str) -> bool:
    return "Request" not in name and "ApiError" not in name


class Planner:
    """Builds a GenerationPlan for a filtered list of endpoints."""

    def __init__(self, schemas: dict[str, Any], naming: NamingContext | None = None) -> None:
        self.schemas = schemas
        self.naming = naming or NamingContext()
        self.synth = ModelSynthesizer(schemas, self.naming)
        self.models: list[ModelFile] = []
        self._handled_components: set[str] = set()
        self._built_classes: set[str] = set()

    def plan(
        self,
        endpoints: list[EndpointInfo],
        all_endpoints: list[EndpointInfo] | None = None,
    ) -> GenerationPlan:
        """Plan methods and files for endpoints.

        all_endpoints is the unfiltered list, used to decide which /v2/
        methods need a V2 suffix.
        """
        all_endpoints = endpoints if all_endpoints is None else all_endpoints

        # Component names are fixed identifiers; claim them before anything
        # path-derived can take one.
        for raw_name in self.schemas:
            self.naming.schema_class_name(raw_name)

        self._plan_response_components(endpoints)
        responses = [self._plan_response(e) for e in endpoints]
        requests = [self._plan_request(e) for e in endpoints]
        self._plan_leftover_components()

        v1_paths = {e.path for e in all_endpoints if not e.path.startswith("/v2/")}
        plans = [
            EndpointPlan(
                endpoint=e,
                method_name=build_method_name(e.method, e.path, v1_paths),
                client=client_for(e),
                response=response,
                request=request,
            )
            for e, response, request in zip(endpoints, responses, requests)
        ]
        return GenerationPlan(plans, self.models, list(self.synth.enums.values()))

    def _add_model(self, model: ModelClass | None, kind: str) -> None:
        if model is None or model.name in self._built_classes:
            return
        self._built_classes.add(model.name)
        self.models.append(ModelFile(model, kind))

    def _emit_component(self, name: str, kind: str) -> None:
        if name in self._handled_components:
            return
        self._handled_components.add(name)

        schema = self.schemas.get(name)
        if not isinstance(schema, dict):
            return
        resolved = resolve_schema(schema, self.schemas)
        if is_string_enum(resolved):
            self.synth.component_enum(name, resolved)
            return

        policy: FieldPolicy = RESPONSE_POLICY if kind == RESPONSE else REQUEST_POLICY
        class_name = self.naming.schema_class_name(name)
        self._add_model(self.synth.build_class(class_name, resolved, policy), kind)

    def _plan_response_components(self, endpoints: list[EndpointInfo]) -> None:
        """Emit every component the included payloads depend on, transitively."""
        roots: dict[str, None] = {}
        for endpoint in endpoints:
            wrapped = endpoint.wrapped_response_schema
            if wrapped is None:
                continue
            if endpoint.wrapped_schema_name:
                roots.setdefault(endpoint.wrapped_schema_name, None)
            collect_ref_names(wrapped, roots)

        for name in collect_transitive_ref_names(roots, self.schemas):
            if _is_response_component(name):
                self._emit_component(name, RESPONSE)

    def _plan_leftover_components(self) -> None:
        """Emit components first seen in request models into the request folder."""
        while True:
            pending = [
                name for name in self.synth.referenced
                if name not in self._handled_components and "ApiError" not in name
            ]
            if not pending:
                return
            for name in pending:
                self._emit_component(name, REQUEST)

    def _plan_response(self, endpoint: EndpointInfo) -> ResponseShape:
        wrapped = endpoint.wrapped_response_schema
        if wrapped is None or is_void_schema(wrapped, self.schemas):
            return ResponseShape(VOID)

        if is_array_schema(wrapped):
            return self._plan_list_response(endpoint, wrapped.get("items") or {})

        primitive = primitive_dart_type(wrapped)
        if primitive is not None:
            return ResponseShape(PRIMITIVE_OBJECT, primitive)

        if endpoint.wrapped_schema_name:
            self._emit_component(endpoint.wrapped_schema_name, RESPONSE)
            return ResponseShape(
                MODEL_OBJECT, self.naming.schema_class_name(endpoint.wrapped_schema_name)
            )

        if endpoint.response_schema_name:
            class_name = self.naming.schema_class_name(endpoint.response_schema_name)
        else:
            class_name = self.naming.register(
                normalize_schema_name(clean_path_for_name(endpoint.path))
            )
        self._add_model(self.synth.build_class(class_name, wrapped, RESPONSE_POLICY), RESPONSE)
        return ResponseShape(MODEL_OBJECT, class_name)

    def _plan_list_response(self, endpoint: EndpointInfo, items: dict[str, Any]) -> ResponseShape:
        if single_ref_name(items) is not None:
            item_type = self.synth.derive_type(items, "", "", [], RESPONSE_POLICY)
            if item_type.kind == MODEL:
                return ResponseShape(MODEL_LIST, item_type.name)
            if item_type.kind == ENUM:
                return ResponseShape(ENUM_LIST, item_type.name)
            if item_type.kind == PRIMITIVE:
                return ResponseShape(PRIMITIVE_LIST, item_type.name)
            return ResponseShape(PRIMITIVE_LIST, "dynamic")

        primitive = primitive_dart_type(items)
        if primitive is not None:
            return ResponseShape(PRIMITIVE_LIST, primitive)

        if self.synth.has_fields(items):
            class_name = self.naming.register(array_item_model_base(endpoint.path))
            self._add_model(self.synth.build_class(class_name, items, RESPONSE_POLICY), RESPONSE)
            return ResponseShape(MODEL_LIST, class_name)

        if items.get("type") == "object":
            return ResponseShape(PRIMITIVE_LIST, _MAP_TYPE)
        return ResponseShape(PRIMITIVE_LIST, "dynamic")

    def _plan_request(self, endpoint: EndpointInfo) -> RequestBody | None:
        schema = endpoint.body_schema
        if not schema:
            return None

        if self.synth.has_fields(schema):
            class_name = self.naming.register(request_model_base(endpoint.path))
            self._add_model(self.synth.build_class(class_name, schema, REQUEST_POLICY), REQUEST)
            return RequestBody(class_name, "request.toJson()")

        primitive = primitive_dart_type(schema)
        if primitive is not None:
            return RequestBody(primitive, "request")

        if is_array_schema(schema):
            items = schema.get("items") or {}
            item_type = self.synth.derive_type(items, "", "", [], REQUEST_POLICY)
            if item_type.kind == MODEL:
                return RequestBody(
                    f"List<{item_type.name}>", "request.map((e) => e.toJson()).toList()"
                )
            if item_type.kind == PRIMITIVE:
                return RequestBody(f"List<{item_type.name}>", "request")
            return RequestBody("List<dynamic>", "request")

        return RequestBody(_MAP_TYPE, "request")
