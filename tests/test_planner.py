"""Tests for the planner: names, return shapes and which files get written."""

import pytest

from dart_api_gen.endpoints import analyze_endpoints, filter_endpoints
from dart_api_gen.errors import SchemaCycleError
from dart_api_gen.planner import (
    AUTH_CLIENT,
    ENUM_LIST,
    MODEL_LIST,
    MODEL_OBJECT,
    NONE_AUTH_CLIENT,
    PRIMITIVE_LIST,
    PRIMITIVE_OBJECT,
    REQUEST,
    RESPONSE,
    VOID,
    Planner,
    ResponseShape,
)


def _plan(spec, allowed=None):
    endpoints = analyze_endpoints(spec)
    selected = filter_endpoints(endpoints, allowed or set())
    return Planner(spec["components"]["schemas"]).plan(selected, endpoints)


def _by_name(plan):
    return {p.method_name: p for p in plan.endpoints}


def _envelope(payload):
    return {
        "200": {
            "content": {
                "application/json": {
                    "schema": {"type": "object", "properties": {"data": payload}},
                }
            }
        }
    }


class TestMethodPlans:
    def test_method_names(self, spec):
        assert [p.method_name for p in _plan(spec).endpoints] == [
            "getV1Users",
            "postV1Users",
            "getV1UsersId",
            "getV1Tags",
            "getV1Profile",
            "getV1Ping",
            "getSearch",
            "postV1AuthLogin",
        ]

    def test_response_shapes(self, spec):
        shapes = {name: p.response for name, p in _by_name(_plan(spec)).items()}
        assert shapes["getV1Users"] == ResponseShape(MODEL_LIST, "User")
        assert shapes["postV1Users"] == ResponseShape(MODEL_OBJECT, "User")
        assert shapes["getV1UsersId"] == ResponseShape(MODEL_OBJECT, "User")
        assert shapes["getV1Tags"] == ResponseShape(PRIMITIVE_LIST, "String")
        assert shapes["getV1Profile"] == ResponseShape(MODEL_OBJECT, "V1Profile")
        assert shapes["getV1Ping"] == ResponseShape(VOID)
        assert shapes["getSearch"] == ResponseShape(PRIMITIVE_OBJECT, "int")
        assert shapes["postV1AuthLogin"] == ResponseShape(MODEL_OBJECT, "Token")

    def test_clients(self, spec):
        plans = _by_name(_plan(spec))
        assert plans["postV1AuthLogin"].client == NONE_AUTH_CLIENT
        assert plans["postV1Users"].client == AUTH_CLIENT

    def test_request_bodies(self, spec):
        plans = _by_name(_plan(spec))
        assert plans["postV1Users"].request.type_name == "V1UsersRequest"
        assert plans["postV1Users"].request.body_argument == "request.toJson()"
        assert plans["postV1AuthLogin"].request.type_name == "V1AuthLoginRequest"
        assert plans["getV1Users"].request is None

    def test_v2_suffix_uses_unfiltered_endpoints(self, spec):
        spec["paths"]["/users"] = {"get": {"responses": _envelope({"type": "string"})}}
        spec["paths"]["/v2/users"] = {"get": {"responses": _envelope({"type": "string"})}}
        plan = _plan(spec, {"get_v2/users"})
        assert [p.method_name for p in plan.endpoints] == ["getUsersV2"]


class TestModelFiles:
    def test_files_and_folders(self, spec):
        plan = _plan(spec)
        assert [(m.model.name, m.kind) for m in plan.models] == [
            ("User", RESPONSE),
            ("Address", RESPONSE),
            ("Token", RESPONSE),
            ("V1Profile", RESPONSE),
            ("V1UsersRequest", REQUEST),
            ("V1AuthLoginRequest", REQUEST),
        ]

    def test_enums(self, spec):
        assert [e.name for e in _plan(spec).enums] == ["Status", "Theme", "Role"]

    def test_nested_class_in_parent_file(self, spec):
        profile = next(m.model for m in _plan(spec).models if m.model.name == "V1Profile")
        assert [c.name for c in profile.all_classes()] == ["V1Profile", "V1ProfileSettings"]

    def test_request_and_error_components_skipped(self, spec):
        names = [m.model.name for m in _plan(spec).models]
        assert "CreateUserRequest" not in names
        assert "ApiError" not in names

    def test_envelope_unwrapped_without_item_class(self, spec):
        names = [m.model.name for m in _plan(spec, {"get_v1/users"}).models]
        assert names == ["User", "Address"]

    def test_inline_array_items(self, spec):
        spec["paths"]["/v1/things"] = {
            "get": {
                "responses": _envelope({
                    "type": "array",
                    "items": {"type": "object", "properties": {"x": {"type": "integer"}}},
                }),
            }
        }
        plan = _plan(spec, {"get_v1/things"})
        assert plan.endpoints[0].response == ResponseShape(MODEL_LIST, "V1ThingsItem")
        assert [m.model.name for m in plan.models] == ["V1ThingsItem"]

    def test_colliding_inline_payloads(self, spec):
        inline = {"type": "object", "properties": {"x": {"type": "integer"}}}
        spec["paths"]["/user"] = {"get": {"responses": _envelope(inline)}}
        spec["paths"]["/v2/user"] = {"get": {"responses": _envelope(inline)}}
        plan = _plan(spec, {"get_user", "get_v2/user"})
        assert [p.response.type_name for p in plan.endpoints] == ["UserData", "UserDataData"]
        assert [m.model.name for m in plan.models] == ["UserData", "UserDataData"]

    def test_request_only_component_goes_to_request_folder(self, spec, schemas):
        schemas["Prefs"] = {"type": "object", "properties": {"lang": {"type": "string"}}}
        schemas["CreateUserRequest"]["properties"]["prefs"] = {"$ref": "#/components/schemas/Prefs"}
        plan = _plan(spec, {"post_v1/users"})
        kinds = {m.model.name: m.kind for m in plan.models}
        assert kinds["Prefs"] == REQUEST
        assert kinds["V1UsersRequest"] == REQUEST
        assert kinds["User"] == RESPONSE

    def test_each_model_once(self, spec):
        names = [m.model.name for m in _plan(spec).models]
        assert len(names) == len(set(names))

    def test_void_component_payload(self, spec, schemas):
        schemas["Nothing"] = {"type": "object"}
        spec["paths"]["/v1/ping"]["get"]["responses"] = _envelope({"$ref": "#/components/schemas/Nothing"})
        plan = _plan(spec, {"get_v1/ping"})
        assert plan.endpoints[0].response.kind == VOID
        assert plan.models == []

    def test_composed_payload_keeps_extra_properties(self, spec):
        spec["paths"]["/v1/me"] = {
            "get": {
                "responses": _envelope({
                    "allOf": [
                        {"$ref": "#/components/schemas/User"},
                        {"type": "object", "properties": {"isFollowing": {"type": "boolean"}}},
                    ]
                }),
            }
        }
        plan = _plan(spec, {"get_v1/me"})
        assert plan.endpoints[0].response == ResponseShape(MODEL_OBJECT, "V1Me")

        models = {m.model.name: m.model for m in plan.models}
        assert [f.json_key for f in models["V1Me"].fields] == [
            "id", "name", "status", "address", "tags", "isFollowing",
        ]
        assert [f.json_key for f in models["User"].fields] == [
            "id", "name", "status", "address", "tags",
        ]

    def test_single_branch_composition_uses_component(self, spec):
        spec["paths"]["/v1/users/{id}"]["get"]["responses"] = _envelope(
            {"allOf": [{"$ref": "#/components/schemas/User"}]}
        )
        plan = _plan(spec, {"get_v1/users/{id}"})
        assert plan.endpoints[0].response == ResponseShape(MODEL_OBJECT, "User")
        assert [m.model.name for m in plan.models] == ["User", "Address"]

    def test_enum_component_list(self, spec, schemas):
        schemas["Role"] = {"type": "string", "enum": ["admin", "member"]}
        spec["paths"]["/v1/roles"] = {
            "get": {
                "responses": _envelope({
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/Role"},
                }),
            }
        }
        plan = _plan(spec, {"get_v1/roles"})
        response = plan.endpoints[0].response
        assert response == ResponseShape(ENUM_LIST, "Role")
        assert response.return_type == "Future<DataListResponse<Role>?>"
        assert [e.name for e in plan.enums] == ["Role"]
        assert plan.models == []

    def test_component_cycle_fails(self, spec, schemas):
        schemas["Loop"] = {"$ref": "#/components/schemas/Loop"}
        spec["paths"]["/v1/ping"]["get"]["responses"] = _envelope({"$ref": "#/components/schemas/Loop"})
        with pytest.raises(SchemaCycleError):
            _plan(spec, {"get_v1/ping"})


class TestRequestBodies:
    @pytest.mark.parametrize(
        ("schema", "type_name", "argument"),
        [
            ({"type": "string"}, "String", "request"),
            ({"type": "array", "items": {"type": "integer"}}, "List<int>", "request"),
            (
                {"type": "array", "items": {"$ref": "#/components/schemas/Address"}},
                "List<Address>",
                "request.map((e) => e.toJson()).toList()",
            ),
            ({"type": "object"}, "Map<String, dynamic>", "request"),
        ],
    )
    def test_non_object_bodies(self, spec, schema, type_name, argument):
        spec["paths"]["/v1/tags"]["get"]["requestBody"] = {
            "content": {"application/json": {"schema": schema}}
        }
        request = _plan(spec, {"get_v1/tags"}).endpoints[0].request
        assert request.type_name == type_name
        assert request.body_argument == argument


class TestResponseShape:
    def test_list_return_type(self):
        shape = ResponseShape(MODEL_LIST, "User")
        assert shape.return_type == "Future<DataListResponse<User>?>"
        assert shape.decoder_type == "SuccessResponseDecoderType.dataJsonArray"
        assert shape.decoder == "(json) => User.fromJson(json.safeCast<Map<String, dynamic>>() ?? {})"

    def test_void(self):
        shape = ResponseShape(VOID)
        assert shape.return_type == "Future<DataResponse<void>?>"
        assert shape.decoder == "(_) => Object()"
        assert shape.decoder_type == "SuccessResponseDecoderType.dataJsonObject"

    def test_enum_list(self):
        shape = ResponseShape(ENUM_LIST, "Role")
        assert shape.decoder_type == "SuccessResponseDecoderType.dataJsonArray"
        assert shape.decoder == (
            "(json) => Role.values.asNameMap()[json.safeCast<String>()] ?? Role.none"
        )

    def test_primitive_fallbacks(self):
        assert ResponseShape(PRIMITIVE_OBJECT, "int").decoder == "(json) => json.safeCast<int>() ?? 0"
        assert ResponseShape(PRIMITIVE_LIST, "String").decoder == "(json) => json.safeCast<String>() ?? ''"
        assert ResponseShape(PRIMITIVE_LIST, "dynamic").decoder == "(json) => json.safeCast<dynamic>()"
