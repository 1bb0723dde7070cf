"""Turn OpenAPI paths and names into Dart identifiers.

Method names follow {verb}{PascalCase(cleanedPath)}:

  GET    /v1/users/{id}                -> getV1UsersId
  POST   /v1/users                     -> postV1Users
  GET    /v2/users  (with /users too)  -> getUsersV2
  GET    /v2/search (no /search)       -> getSearch
  GET    /getRecommendations/saved     -> getRecommendationsSaved

Class names are handed out by a NamingContext so that every synthesized
type is unique for the whole run.
"""

from __future__ import annotations

import re

_METHOD_VERBS: dict[str, str] = {
    "GET": "get",
    "POST": "post",
    "PUT": "put",
    "PATCH": "patch",
    "DELETE": "delete",
}

# A verb accidentally baked into the start of a path segment
_EMBEDDED_VERB = re.compile(r"(^|/)(?:get|post|put|patch|delete)(?=[A-Z_\-/]|$)")

_DART_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

_DART_RESERVED = frozenset({
    "assert", "break", "case", "catch", "class", "const", "continue",
    "default", "do", "else", "enum", "extends", "false", "final", "finally",
    "for", "if", "in", "is", "new", "null", "rethrow", "return", "super",
    "switch", "this", "throw", "true", "try", "var", "void", "while", "with",
})


def to_pascal_case(value: str) -> str:
    """snake_case or camelCase to PascalCase; inner capitals are kept."""
    return "".join(word[0].upper() + word[1:] for word in value.split("_") if word)


def to_camel_case(value: str) -> str:
    """Convert 'salary_type' or 'SalaryType' to 'salaryType'."""
    if not value:
        return ""
    if "_" in value:
        parts = [p for p in value.split("_") if p]
        if not parts:
            return ""
        return parts[0].lower() + "".join(p[0].upper() + p[1:].lower() for p in parts[1:])
    return value[0].lower() + value[1:]


def to_snake_case(class_name: str) -> str:
    """PascalCase class name to the snake_case file stem Dart expects."""
    return re.sub(r"([a-z])([A-Z])", r"\1_\2", class_name).lower()


def clean_path_for_name(path: str) -> str:
    """Reduce an API path to underscore-separated words.

    '/v2/' infixes and verbs glued to the front of a segment are dropped,
    every other non-alphanumeric run becomes a single underscore.
    """
    clean = path[1:] if path.startswith("/") else path
    clean = clean.replace("v2/", "")
    clean = _EMBEDDED_VERB.sub(r"\1", clean)
    clean = re.sub(r"[^a-zA-Z0-9_]", "_", clean)
    clean = re.sub(r"_+", "_", clean)
    return clean.strip("_")


def normalize_schema_name(name: str) -> str:
    """Build a class name from a cleaned path or a raw schema name."""
    if "__" in name:
        name = name.split("__")[-1]
    name = re.sub(r"[^A-Za-z0-9]", "_", name)
    if "_" not in name:
        return name[0].upper() + name[1:] if name else "Model"

    segments = "".join(
        segment[0].upper() + segment[1:].lower() for segment in name.split("_") if segment
    )
    return segments or "Model"


def build_method_name(method: str, path: str, v1_paths: set[str]) -> str:
    """Build the Dart method name for an endpoint.

    A /v2/ endpoint only gets a V2 suffix when its v1 twin is also present.
    """
    clean = clean_path_for_name(path)
    verb = _METHOD_VERBS.get(method.upper())
    name = f"{verb}{to_pascal_case(clean)}" if verb else to_camel_case(clean)

    if path.startswith("/v2/") and path.replace("/v2/", "/", 1) in v1_paths:
        name += "V2"
    return name


def request_model_base(path: str) -> str:
    """Desired request class name for a path, before collision handling."""
    base = to_pascal_case(clean_path_for_name(path))
    if base.endswith("Data"):
        base = base[:-4]
    return f"{base}Request"


def array_item_model_base(path: str) -> str:
    return f"{to_pascal_case(clean_path_for_name(path))}Item"


def enum_base_name(field_name: str) -> str:
    name = to_pascal_case(field_name)
    if name.endswith("Enum") and len(name) > 4:
        name = name[:-4]
    return name


def dart_identifier(value: str) -> str:
    """Make a value usable as a Dart field or enum member name."""
    if _DART_IDENTIFIER.match(value) and value not in _DART_RESERVED:
        return value
    name = to_camel_case(re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_"))
    if not name:
        return "value"
    if name[0].isdigit() or name in _DART_RESERVED:
        return f"value{name[0].upper()}{name[1:]}"
    return name


def field_name(json_key: str) -> str:
    """Dart field name for a JSON property key."""
    return dart_identifier(to_camel_case(json_key) or json_key)


class NamingContext:
    """Hands out class names that are unique across one generator run.

    Component schema names are claimed as-is and cached; synthesized names go
    through register(), which appends 'Data' until the name is free.
    """

    def __init__(self) -> None:
        self._used: set[str] = set()
        self._schema_names: dict[str, str] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def register(self, desired: str) -> str:
        candidate = desired
        while candidate in self._used:
            candidate = f"{candidate}Data"
        self._used.add(candidate)
        return candidate

    def claim(self, name: str) -> str:
        """Mark name as taken without collision handling."""
        self._used.add(name)
        return name

    def schema_class_name(self, raw_name: str) -> str:
        """Class name for a component schema, stable for the whole run."""
        cached = self._schema_names.get(raw_name)
        if cached is not None:
            return cached
        if _DART_IDENTIFIER.match(raw_name) and "$" not in raw_name:
            class_name = raw_name
        else:
            class_name = normalize_schema_name(raw_name)
        self._schema_names[raw_name] = class_name
        return self.claim(class_name)
