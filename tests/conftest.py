"""Shared fixtures for generator tests.

Builds a small OpenAPI document and a Flutter project skeleton in tmp_path
so end-to-end runs can write real files.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from dart_api_gen.config import APP_API_SERVICE_PATH, DATA_RESPONSE_PATH


def envelope(payload: dict[str, Any], key: str = "data") -> dict[str, Any]:
    """A 200 response wrapping payload under key."""
    return {
        "200": {
            "description": "OK",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "code": {"type": "integer"},
                            key: payload,
                        },
                    }
                }
            },
        }
    }


def json_body(schema: dict[str, Any]) -> dict[str, Any]:
    return {"content": {"application/json": {"schema": schema}}}


# ---------------------------------------------------------------------------
# OpenAPI document
# ---------------------------------------------------------------------------

SPEC: dict[str, Any] = {
    "openapi": "3.0.1",
    "info": {"title": "Sample", "version": "1.0.0"},
    "paths": {
        "/v1/users": {
            "get": {
                "summary": "List users",
                "parameters": [
                    {"name": "page", "in": "query", "schema": {"type": "integer"}},
                    {"name": "keyword", "in": "query", "required": True, "schema": {"type": "string"}},
                ],
                "responses": envelope({
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/User"},
                }),
            },
            "post": {
                "requestBody": json_body({"$ref": "#/components/schemas/CreateUserRequest"}),
                "responses": envelope({"$ref": "#/components/schemas/User"}),
            },
        },
        "/v1/users/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
            ],
            "get": {
                "responses": envelope({"$ref": "#/components/schemas/User"}),
            },
        },
        "/v1/tags": {
            "get": {
                "responses": envelope({"type": "array", "items": {"type": "string"}}),
            },
        },
        "/v1/profile": {
            "get": {
                "responses": envelope({
                    "type": "object",
                    "properties": {
                        "nickname": {"type": "string"},
                        "settings": {
                            "type": "object",
                            "properties": {
                                "theme": {"type": "string", "enum": ["light", "dark"]},
                            },
                        },
                    },
                }),
            },
        },
        "/v1/ping": {
            "get": {
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/v2/search": {
            "get": {
                "responses": envelope({"type": "integer"}),
            },
        },
        "/v1/auth/login": {
            "post": {
                "requestBody": json_body({
                    "type": "object",
                    "required": ["email", "password"],
                    "properties": {
                        "email": {"type": "string"},
                        "password": {"type": "string"},
                    },
                }),
                "responses": envelope({"$ref": "#/components/schemas/Token"}),
            },
        },
    },
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                    "status": {"type": "string", "enum": ["active", "inactive"]},
                    "address": {"$ref": "#/components/schemas/Address"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            },
            "Address": {
                "type": "object",
                "properties": {
                    "city": {"type": "string"},
                    "zip_code": {"type": "string", "nullable": True},
                },
            },
            "CreateUserRequest": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "age": {"type": "integer"},
                    "role": {"type": "string", "enum": ["admin", "member"]},
                },
            },
            "Token": {
                "type": "object",
                "properties": {
                    "access_token": {"type": "string"},
                },
            },
            "ApiError": {
                "type": "object",
                "properties": {"message": {"type": "string"}},
            },
        }
    },
}


@pytest.fixture
def spec() -> dict[str, Any]:
    """A fresh copy of the sample document, safe to mutate."""
    return copy.deepcopy(SPEC)


@pytest.fixture
def schemas(spec) -> dict[str, Any]:
    return spec["components"]["schemas"]


# ---------------------------------------------------------------------------
# Flutter project skeleton
# ---------------------------------------------------------------------------

SERVICE_SOURCE = """\
import '../../index.dart';

class AppApiService {
  AppApiService(this._noneAuthAppServerApiClient, this._authAppServerApiClient);

  final NoneAuthAppServerApiClient _noneAuthAppServerApiClient;
  final AuthAppServerApiClient _authAppServerApiClient;

  Future<void> handWritten() async {
    final text = 'not a } brace';
  }

  // GENERATED CODE - DO NOT MODIFY OR DELETE THIS COMMENT
}
"""

DATA_RESPONSE_SOURCE = """\
@freezed
sealed class DataResponse<T> with _$DataResponse<T> {
  const factory DataResponse({
    @JsonKey(name: 'data') T? data,
  }) = _DataResponse;
}

@freezed
sealed class DataListResponse<T> with _$DataListResponse<T> {
  const factory DataListResponse({
    @JsonKey(name: 'data') List<T>? data,
  }) = _DataListResponse;
}
"""


@pytest.fixture
def service_source() -> str:
    return SERVICE_SOURCE


@pytest.fixture
def data_response_source() -> str:
    return DATA_RESPONSE_SOURCE


@pytest.fixture
def project(tmp_path, spec) -> Path:
    """A project root holding api_doc/openapi.json and the service file."""
    (tmp_path / "api_doc").mkdir()
    (tmp_path / "api_doc" / "openapi.json").write_text(json.dumps(spec), encoding="utf-8")

    service = tmp_path / APP_API_SERVICE_PATH
    service.parent.mkdir(parents=True)
    service.write_text(SERVICE_SOURCE, encoding="utf-8")

    data_response = tmp_path / DATA_RESPONSE_PATH
    data_response.parent.mkdir(parents=True)
    data_response.write_text(DATA_RESPONSE_SOURCE, encoding="utf-8")
    return tmp_path
