"""Build EndpointInfo records from the OpenAPI paths object.

One record per (method, path) pair. Response schemas are resolved and the
payload under the envelope key is pulled out so later stages never have to
look at the raw document again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .loader import get_paths, get_schemas
from .schema_parser import extract_ref_name, merge_composition, resolve_schema, single_ref_name

logger = logging.getLogger(__name__)

# Operation keys inside a path item, in the order they are emitted
HTTP_METHODS = ("get", "post", "put", "patch", "delete")

# First match wins
_SUCCESS_STATUSES = ("200", "201", "202")


@dataclass(frozen=True)
class QueryParam:
    """A query or path parameter as it appears in the generated signature."""

    name: str
    type: str  # Dart type: int or String
    required: bool


@dataclass(frozen=True)
class EndpointInfo:
    method: str
    path: str
    query_params: tuple[QueryParam, ...] = ()
    path_params: tuple[QueryParam, ...] = ()
    has_body: bool = False
    body_schema: dict[str, Any] | None = None
    response_schema: dict[str, Any] | None = None
    wrapped_response_schema: dict[str, Any] | None = None
    response_schema_name: str | None = None
    wrapped_schema_name: str | None = None
    operation_id: str | None = None
    summary: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        """Filter key in the form used by --apis, e.g. 'get_/v1/users'."""
        return f"{self.method.lower()}_{self.path}".lower()


def _param_dart_type(schema: dict[str, Any]) -> str:
    return "int" if schema.get("type") == "integer" else "String"


def _extract_params(
    path_item: dict[str, Any],
    operation: dict[str, Any],
    location: str,
) -> tuple[QueryParam, ...]:
    """Collect parameters of one location; operation-level entries win."""
    by_name: dict[str, dict[str, Any]] = {}
    for param in [*path_item.get("parameters", []), *operation.get("parameters", [])]:
        if param.get("in") == location and "name" in param:
            by_name[param["name"]] = param

    return tuple(
        QueryParam(
            name=name,
            type=_param_dart_type(param.get("schema") or {}),
            required=bool(param.get("required", location == "path")),
        )
        for name, param in by_name.items()
    )


def _extract_request_body_schema(
    operation: dict[str, Any],
    schemas: dict[str, Any],
) -> dict[str, Any] | None:
    request_body = operation.get("requestBody")
    if request_body is None:
        return None

    content = request_body.get("content") or {}
    json_content = content.get("application/json") or {}
    return resolve_schema(json_content.get("schema") or {}, schemas)


def _extract_response_schema(operation: dict[str, Any]) -> dict[str, Any] | None:
    """Return the raw schema of the first 2xx response, or None."""
    responses = operation.get("responses") or {}
    for status in _SUCCESS_STATUSES:
        success = responses.get(status)
        if success is not None:
            content = success.get("content") or {}
            json_content = content.get("application/json") or {}
            return json_content.get("schema") or {}
    return None


def extract_wrapped_schema(
    schema: dict[str, Any],
    schemas: dict[str, Any],
    envelope_key: str,
) -> tuple[dict[str, Any] | None, str | None]:
    """Return the payload under envelope_key and its component name, if any.

    The name is only reported when the payload is nothing but a reference;
    a composition that adds properties is a new type.
    """
    effective = merge_composition(schema, schemas)
    properties = effective.get("properties")
    if effective.get("type") != "object" or not isinstance(properties, dict):
        return None, None
    if envelope_key not in properties:
        return None, None

    raw = properties[envelope_key] or {}
    return resolve_schema(raw, schemas), single_ref_name(raw)


def analyze_endpoints(spec: dict[str, Any], envelope_key: str = "data") -> list[EndpointInfo]:
    """Produce one EndpointInfo per operation in document order."""
    schemas = get_schemas(spec)
    endpoints: list[EndpointInfo] = []

    for path, path_item in get_paths(spec).items():
        for method, operation in path_item.items():
            if method not in HTTP_METHODS or not isinstance(operation, dict):
                continue

            raw_response = _extract_response_schema(operation)
            resolved_response = resolve_schema(raw_response or {}, schemas)
            wrapped, wrapped_name = extract_wrapped_schema(
                resolved_response, schemas, envelope_key
            )

            endpoints.append(EndpointInfo(
                method=method.upper(),
                path=path,
                query_params=_extract_params(path_item, operation, "query"),
                path_params=_extract_params(path_item, operation, "path"),
                has_body="requestBody" in operation,
                body_schema=_extract_request_body_schema(operation, schemas),
                response_schema=None if raw_response is None else resolved_response,
                wrapped_response_schema=wrapped,
                response_schema_name=extract_ref_name(raw_response),
                wrapped_schema_name=wrapped_name,
                operation_id=operation.get("operationId"),
                summary=operation.get("summary"),
                tags=tuple(operation.get("tags") or ()),
            ))

    logger.info("Found %d endpoints", len(endpoints))
    return endpoints


def parse_apis_filter(apis: str | None) -> set[str]:
    """Split '--apis=get_v1/search,post_v2/city' into lower-cased keys."""
    if not apis:
        return set()
    return {api.strip().lower() for api in apis.split(",") if api.strip()}


def filter_endpoints(endpoints: list[EndpointInfo], allowed: set[str]) -> list[EndpointInfo]:
    """Keep endpoints whose key is allowed; an empty filter keeps everything.

    Keys match with or without the path's leading slash, so both
    'get_v1/users' and 'get_/v1/users' select GET /v1/users.
    """
    if not allowed:
        return list(endpoints)
    return [
        e for e in endpoints
        if e.key in allowed or e.key.replace("_/", "_", 1) in allowed
    ]


def log_missing_wrapped(endpoints: list[EndpointInfo], envelope_key: str) -> list[str]:
    """Warn about endpoints that declare a response but no envelope key."""
    problems = [
        f"{e.method} {e.path} -> missing wrapped key \"{envelope_key}\""
        for e in endpoints
        if e.response_schema is not None and e.wrapped_response_schema is None
    ]
    if problems:
        logger.warning(
            "Wrapped key \"%s\" not found in some endpoint responses:\n%s",
            envelope_key,
            "\n".join(f" - {p}" for p in problems),
        )
    return problems
